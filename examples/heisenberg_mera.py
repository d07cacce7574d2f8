#!/usr/bin/env python

"""
Optimize a U(1) symmetric ternary MERA for the Heisenberg chain.
"""

import numpy as np

from ternmera import TernaryMERA, U1_Space, minimize_expectation
from ternmera.models import (
    HEISENBERG_EXACT_ENERGY,
    heisenberg_hamiltonian,
    physical_space,
    shift_negative,
)

pars = {
    "miniter": 10,
    "maxiter": 300,
    "rho_delta": 1e-7,
    "u_iters": 5,
    "w_iters": 5,
    "uw_iters": 2,
    "havg_depth": 10,
}

h, normalization = shift_negative(heisenberg_hamiltonian())
rng = np.random.default_rng(42)

# spin 1/2 charges are 1 and -1, odd charges are kept at every scale
V0 = physical_space("U1")
V1 = U1_Space(np.array([1, -1, 3, -3, 1, -1], dtype=np.int8))
mera = TernaryMERA.random([V0, V1, V1], random_u=True, rng=rng, verbosity=1)

print("Heisenberg chain, exact energy =", HEISENBERG_EXACT_ENERGY)
minimize_expectation(mera, h, pars, normalization=normalization, verbosity=1)
energy = normalization(mera.expect(h))
print(f"D = {V1.dim}: energy = {energy:.9f}")

# one more transition layer, then more states in the low charge sectors
mera.release_transition_layer()
mera.expand_bond_dimension(mera.n_translayers - 1, {1: 3, -1: 3})
minimize_expectation(mera, h, pars, normalization=normalization, verbosity=1)
energy = normalization(mera.expect(h))
print(f"D = {mera.get_inputspace(np.inf).dim}: energy = {energy:.9f}")
print(f"error = {energy - HEISENBERG_EXACT_ENERGY:.3e}")
