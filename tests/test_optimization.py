#!/usr/bin/env python3

import numpy as np
import pytest

from ternmera import (
    TernaryMERA,
    TrivialSpace,
    U1_Space,
    iterate_minimization,
    minimize_expectation,
)
from ternmera.mera.mera_tools import u_leg_spaces, w_leg_spaces
from ternmera.models import (
    HEISENBERG_EXACT_ENERGY,
    heisenberg_hamiltonian,
    ising_exact_energy,
    ising_hamiltonian,
    physical_space,
    shift_negative,
)
from ternmera.vector_space import allowed_mask

rng = np.random.default_rng(42)
pars = {
    "miniter": 2,
    "maxiter": 6,
    "rho_delta": 0.0,
    "u_iters": 2,
    "w_iters": 2,
    "uw_iters": 1,
    "havg_depth": 3,
}
h_ising, norm_ising = shift_negative(ising_hamiltonian())


def test_models():
    assert abs(ising_exact_energy() + 4 / np.pi) < 1e-12
    hm = h_ising.reshape(4, 4)
    assert np.linalg.eigvalsh(hm)[-1] < 1e-14
    assert abs(norm_ising(0.0) - np.sqrt(2)) < 1e-14
    h = heisenberg_hamiltonian()
    V = physical_space("U1")
    assert np.abs(h[~allowed_mask(u_leg_spaces(V))]).max() == 0.0
    with pytest.raises(ValueError):
        shift_negative(1j * h)


def test_parameters():
    mera = TernaryMERA.random(TrivialSpace(2), 2, rng=rng)
    with pytest.raises(ValueError):
        minimize_expectation(mera, h_ising, {"min_iter": 2})
    with pytest.raises(ValueError):
        minimize_expectation(mera, h_ising, {"miniter": -1})
    with pytest.raises(ValueError):
        minimize_expectation(mera, h_ising, {"maxiter": 2.5})
    with pytest.raises(ValueError):
        minimize_expectation(mera, h_ising, {"rho_delta": -1e-3})
    with pytest.raises(ValueError):
        minimize_expectation(mera, np.zeros((3, 3, 3, 3)), pars)


def test_termination():
    mera = TernaryMERA.random(TrivialSpace(2), 2, rng=rng)
    pars2 = pars | {"maxiter": 20}
    states = list(iterate_minimization(mera, h_ising, pars2 | {"rho_delta": 1e3}))
    assert len(states) == 3
    assert [s.counter for s in states] == [1, 2, 3]
    assert states[0].rhos_maxchange == np.inf
    assert states[1].rhos_maxchange < 1e3

    # first iteration never converges
    pars0 = pars2 | {"miniter": 0, "rho_delta": 1e3}
    states = list(iterate_minimization(mera, h_ising, pars0))
    assert len(states) == 2

    states = list(iterate_minimization(mera, h_ising, pars))
    assert len(states) == 6
    assert len(states[-1].energies) == 6
    assert len(states[-1].rhos) == mera.n_layers


def test_energy_decreases():
    mera = TernaryMERA.random(TrivialSpace(2), 2, rng=rng)
    eye = np.eye(4).reshape(2, 2, 2, 2)
    assert abs(mera.expect(eye) - 1.0) < 1e-12
    pars2 = pars | {"maxiter": 12}
    states = list(
        iterate_minimization(mera, h_ising, pars2, normalization=norm_ising)
    )
    energies = np.array(states[-1].energies)
    assert energies.size == 12
    assert np.diff(energies).max() < 1e-10
    assert energies[-1] < energies[0]


def test_ising_energy(capsys):
    mera = TernaryMERA.random(TrivialSpace(2), 3, random_u=True, rng=rng)
    e0 = norm_ising(mera.expect(h_ising))
    states = list(
        iterate_minimization(mera, h_ising, pars, normalization=norm_ising, verbosity=1)
    )
    out = capsys.readouterr().out
    assert "Optimizing a MERA with 3 layers" in out
    assert "Energy = " in out
    energy = states[-1].energy
    assert isinstance(energy, float)
    assert abs(energy - norm_ising(mera.expect(h_ising))) < 1e-10
    assert energy < e0
    assert energy > ising_exact_energy() - 1e-8
    assert mera.check_isometries(1e-10)


def test_expand_and_optimize():
    mera = TernaryMERA.random(TrivialSpace(2), 2, random_u=True, rng=rng)
    minimize_expectation(mera, h_ising, pars, normalization=norm_ising)
    e2 = norm_ising(mera.expect(h_ising))
    mera.expand_bond_dimension(0, 3)
    assert not mera.check_isometries()
    # padding does not change the state
    assert abs(norm_ising(mera.expect(h_ising)) - e2) < 1e-10
    minimize_expectation(mera, h_ising, pars | {"miniter": 1}, normalization=norm_ising)
    assert mera.check_isometries(1e-10)
    assert norm_ising(mera.expect(h_ising)) < e2 + 1e-10

    mera.release_transition_layer()
    minimize_expectation(mera, h_ising, pars, lowest_to_optimize=1)
    assert mera.check_isometries(1e-10)


def test_u1_heisenberg():
    h, normalization = shift_negative(heisenberg_hamiltonian())
    V0 = physical_space("U1")
    V1 = U1_Space(np.array([1, -1, 3, -3], dtype=np.int8))
    mera = TernaryMERA.random([V0, V1], random_u=True, rng=rng)
    e0 = normalization(mera.expect(h))
    pars1 = pars | {"maxiter": 4}
    mera = minimize_expectation(mera, h, pars1, normalization=normalization)
    energy = normalization(mera.expect(h))
    assert energy < e0
    assert energy > HEISENBERG_EXACT_ENERGY - 1e-8
    assert mera.check_isometries(1e-10)
    for layer in range(mera.n_layers):
        u, w = mera.get_uw(layer)
        vin = mera.get_inputspace(layer)
        vout = mera.get_outputspace(layer)
        assert np.abs(u[~allowed_mask(u_leg_spaces(vin))]).max() == 0.0
        assert np.abs(w[~allowed_mask(w_leg_spaces(vin, vout))]).max() == 0.0
