#!/usr/bin/env python3

import numpy as np
import pytest
import scipy.linalg as lg

from ternmera import InvalidScaleRange, TernaryMERA, TrivialSpace

rng = np.random.default_rng(42)
tol = 1e-10

mera = TernaryMERA.random(
    [TrivialSpace(2), TrivialSpace(3), TrivialSpace(3)], random_u=True, rng=rng
)
eye2 = np.eye(4).reshape(2, 2, 2, 2)


def random_op(d):
    m = rng.normal(size=(d * d, d * d)) + 1j * rng.normal(size=(d * d, d * d))
    return m.reshape(d, d, d, d)


def test_fixed_point_rho():
    rho = mera.build_fixedpoint_rho()
    assert rho.shape == (3, 3, 3, 3)
    assert abs(np.einsum("abab->", rho) - 1.0) < tol
    rhom = rho.reshape(9, 9)
    assert lg.norm(rhom - rhom.T.conj()) < tol
    assert lg.eigvalsh(rhom)[0] > -tol

    # one more scale invariant step does not change rho
    nt = mera.n_translayers
    rho2 = mera.descend(rho, startscale=nt + 1, endscale=nt)
    assert lg.norm(rho2 - rho) < tol

    # dense and sparse eigensolvers agree
    rho3 = mera.build_fixedpoint_rho(dmax_full=10)
    assert lg.norm(rho3 - rho) < 1e-8


def test_build_rhos():
    rhos = mera.build_rhos()
    assert len(rhos) == mera.n_translayers + 1
    assert rhos[0].shape == (2, 2, 2, 2)
    assert rhos[1].shape == (3, 3, 3, 3)
    assert lg.norm(rhos[-1] - mera.build_fixedpoint_rho()) < tol
    assert lg.norm(rhos[0] - mera.build_rho(0)) < tol
    assert lg.norm(rhos[1] - mera.build_rho(1)) < tol
    assert lg.norm(mera.build_rho(5) - rhos[-1]) < tol
    for rho in rhos:
        assert abs(np.einsum("abab->", rho) - 1.0) < tol

    rhos1 = mera.build_rhos(1)
    assert len(rhos1) == 2
    assert lg.norm(rhos1[0] - rhos[1]) < tol


def test_scale_range():
    op = random_op(2)
    with pytest.raises(InvalidScaleRange):
        mera.ascend(op, startscale=2, endscale=1)
    with pytest.raises(InvalidScaleRange):
        mera.descend(op, startscale=0, endscale=1)
    with pytest.raises(InvalidScaleRange):
        mera.expect(op, opscale=2, evalscale=0)
    assert mera.ascend(op, startscale=1, endscale=1) is op

    # ascending and descending through several layers are adjoint
    rho = random_op(3)
    asc = mera.ascend(op, startscale=0, endscale=3)
    desc = mera.descend(rho, startscale=3, endscale=0)
    x1 = np.einsum("abcd,cdab->", rho, asc)
    x2 = np.einsum("abcd,cdab->", desc, op)
    assert abs(x1 - x2) < 1e-12 * abs(x1)


def test_expect():
    for scale in range(4):
        assert abs(mera.expect(eye2, evalscale=scale) - 1.0) < tol
    eye3 = np.eye(9).reshape(3, 3, 3, 3)
    assert abs(mera.expect(eye3, opscale=1) - 1.0) < tol

    # result does not depend on the evaluation scale
    h = random_op(2)
    h = h + h.transpose(2, 3, 0, 1).conj()
    e0 = mera.expect(h, evalscale=0)
    e1 = mera.expect(h, evalscale=1)
    e2 = mera.expect(h)
    assert isinstance(e2, float)
    assert abs(e1 - e0) < tol
    assert abs(e2 - e0) < tol


def test_nonreal_expectation(capsys):
    value = mera.expect(1j * eye2 + 2 * eye2)
    assert abs(value - 2.0) < tol
    assert "Warning: non-real expectation value" in capsys.readouterr().out

    value = mera.expect(2 * eye2)
    assert abs(value - 2.0) < tol
    assert capsys.readouterr().out == ""
