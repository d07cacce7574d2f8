"""
Environments of disentanglers and isometries for a two-site Hamiltonian and local
updates. An environment has the shape of the tensor it is computed for: the energy
contribution of the layer reads sum(env * t) for fixed t adjoint. The update replaces
t by the isometry maximizing Re(sum(env * t)), which minimizes the energy of a
negative semidefinite Hamiltonian.
"""

import numpy as np

from ..misc_tools import contract, polar_isometry
from ..vector_space import combine_spaces
from .superoperators import u_dagger, w_dagger

# each term: Hamiltonian on the left, middle and right of the disentangler
_u_env_subscripts = (
    "abcd,cefA,dBgh,fCij,jDkl,eika,lghb->ABCD",
    "abcd,cefA,dBgh,CDij,ijkl,efka,lghb->ABCD",
    "abcd,cefA,dBgh,Dgij,Cikl,efka,ljhb->ABCD",
)

# first three terms: isometry on the left of the disentangler, last three: on the right
_w_env_subscripts = (
    "abcA,cdef,fBgh,egij,jhkl,dika,lCDb->ABCD",
    "abcA,cdef,fBgh,ghij,ijkl,deka,lCDb->ABCD",
    "abcA,cdef,fBgh,hCij,gikl,deka,ljDb->ABCD",
    "abAc,cdef,Ddgh,Cgij,jhkl,Bika,lefb->ABCD",
    "abAc,cdef,Ddgh,ghij,ijkl,BCka,lefb->ABCD",
    "abAc,cdef,Ddgh,heij,gikl,BCka,ljfb->ABCD",
)


def environment_u(h, u, w, rho):
    u_dg = u_dagger(u)
    w_dg = w_dagger(w)
    env = np.zeros(u.shape, dtype=np.complex128)
    for subscripts in _u_env_subscripts:
        env += contract(subscripts, rho, w, w, h, u_dg, w_dg, w_dg)
    return env


def environment_w(h, u, w, rho):
    u_dg = u_dagger(u)
    w_dg = w_dagger(w)
    env = np.zeros(w.shape, dtype=np.complex128)
    for subscripts in _w_env_subscripts:
        env += contract(subscripts, rho, w, u, h, u_dg, w_dg, w_dg)
    return env


def layer_irreps(vin, vout):
    """
    Irreps of rows and columns for disentangler and isometry of a layer with input
    space vin and output space vout, as matrices.
    """
    u_irreps = combine_spaces((vin, vin))
    w_rows = combine_spaces((vout,))
    w_cols = combine_spaces((vin, vin, vin))
    return (u_irreps, u_irreps), (w_rows, w_cols)


def minimize_expectation_u(h, u, w, rho, irreps=(None, None)):
    env = environment_u(h, u, w, rho)
    return polar_isometry(env, 2, *irreps)


def minimize_expectation_w(h, u, w, rho, irreps=(None, None)):
    env = environment_w(h, u, w, rho)
    return polar_isometry(env, 1, *irreps)


def minimize_expectation_uw(h, u, w, rho, pars, *, do_u=True, spaces=None):
    """
    Optimize disentangler and isometry of one layer.

    Parameters
    ----------
    h : (D, D, D, D) ndarray
        Negative semidefinite two-site Hamiltonian at the layer input scale.
    u : (D, D, D, D) ndarray
        Disentangler.
    w : (Dout, D, D, D) ndarray
        Isometry.
    rho : (Dout, Dout, Dout, Dout) ndarray
        Density matrix at the layer output scale.
    pars : dict
        Optimization parameters. Read uw_iters, u_iters and w_iters.
    do_u : bool
        Whether to update the disentangler. Default is True.
    spaces : tuple of VectorSpace
        Layer input and output spaces. If provided, updates are done independently
        in each symmetry sector.

    Returns
    -------
    u : ndarray
        New disentangler.
    w : ndarray
        New isometry.
    """
    if spaces is None:
        u_irreps, w_irreps = (None, None), (None, None)
    else:
        u_irreps, w_irreps = layer_irreps(*spaces)
    for _ in range(pars["uw_iters"]):
        if do_u:
            for _ in range(pars["u_iters"]):
                u = minimize_expectation_u(h, u, w, rho, u_irreps)
        for _ in range(pars["w_iters"]):
            w = minimize_expectation_w(h, u, w, rho, w_irreps)
    return u, w
