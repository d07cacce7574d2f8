#!/usr/bin/env python3

import numpy as np
import scipy.linalg as lg

from ternmera import ascend_twosite
from ternmera.mera import environment_u, environment_w, minimize_expectation_uw
from ternmera.mera.environments import minimize_expectation_u, minimize_expectation_w

rng = np.random.default_rng(42)
D = 2
Dout = 3


def random_tensor(shape):
    return rng.normal(size=shape) + 1j * rng.normal(size=shape)


u = random_tensor((D, D, D, D))
w = random_tensor((Dout, D, D, D))
h = random_tensor((D, D, D, D))
rho = random_tensor((Dout, Dout, Dout, Dout))
x = np.einsum("abcd,cdab->", rho, ascend_twosite(h, u, w))


def test_environment_contraction():
    # u appears once in each of the 3 positions, w twice
    env_u = environment_u(h, u, w, rho)
    assert env_u.shape == u.shape
    xu = np.einsum("abcd,abcd->", env_u, u)
    assert abs(xu - 3 * x) < 1e-12 * abs(x)

    env_w = environment_w(h, u, w, rho)
    assert env_w.shape == w.shape
    xw = np.einsum("abcd,abcd->", env_w, w)
    assert abs(xw - 6 * x) < 1e-12 * abs(x)


def test_local_updates():
    env_u = environment_u(h, u, w, rho)
    env_w = environment_w(h, u, w, rho)
    u2 = minimize_expectation_u(h, u, w, rho)
    w2 = minimize_expectation_w(h, u, w, rho)
    um = u2.reshape(D**2, D**2)
    assert lg.norm(um @ um.T.conj() - np.eye(D**2)) < 1e-12
    wm = w2.reshape(Dout, D**3)
    assert lg.norm(wm @ wm.T.conj() - np.eye(Dout)) < 1e-12

    # updated tensors maximize the linearized cost among isometries
    best_u = np.einsum("abcd,abcd->", env_u, u2).real
    best_w = np.einsum("abcd,abcd->", env_w, w2).real
    assert abs(best_u - lg.svdvals(env_u.reshape(D**2, D**2)).sum()) < 1e-12 * best_u
    assert abs(best_w - lg.svdvals(env_w.reshape(Dout, D**3)).sum()) < 1e-12 * best_w


def test_minimize_uw():
    pars = {"uw_iters": 2, "u_iters": 3, "w_iters": 3}
    u2, w2 = minimize_expectation_uw(h, u, w, rho, pars, do_u=False)
    assert u2 is u
    assert lg.norm(w2 - w) > 0.1
    u3, w3 = minimize_expectation_uw(h, u, w, rho, pars)
    assert lg.norm(u3 - u) > 0.1
    pars = {"uw_iters": 0, "u_iters": 3, "w_iters": 3}
    u4, w4 = minimize_expectation_uw(h, u, w, rho, pars)
    assert u4 is u and w4 is w
