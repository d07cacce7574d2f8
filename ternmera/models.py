"""
Two-site Hamiltonians for spin-1/2 chains, as (2, 2, 2, 2) arrays with legs
(bra1, bra2, ket1, ket2).
"""

import numpy as np
import scipy.integrate
import scipy.linalg as lg

from ternmera.vector_space import TrivialSpace, U1_Space

sx = np.array([[0.0, 1.0], [1.0, 0.0]])
sz = np.array([[1.0, 0.0], [0.0, -1.0]])
eye2 = np.eye(2)

# S.S for two spin 1/2
SdS_22 = np.array(
    [
        [0.25, 0.0, 0.0, 0.0],
        [0.0, -0.25, 0.5, 0.0],
        [0.0, 0.5, -0.25, 0.0],
        [0.0, 0.0, 0.0, 0.25],
    ]
)

# ground state energy per site of the infinite Heisenberg chain
HEISENBERG_EXACT_ENERGY = 0.25 - np.log(2.0)


def physical_space(symmetry):
    """
    Vector space for a spin 1/2, with Sz charges (in units of 1/2) for U(1).
    """
    if symmetry == "trivial":
        return TrivialSpace(2)
    if symmetry == "U1":
        return U1_Space(np.array([1, -1], dtype=np.int8))
    raise ValueError(f"Unsupported symmetry '{symmetry}'")


def heisenberg_hamiltonian():
    """
    Nearest neighbor Heisenberg bond Hamiltonian S_i.S_j. Conserves total Sz.
    """
    return SdS_22.reshape(2, 2, 2, 2).astype(np.complex128)


def ising_hamiltonian(h_field=1.0):
    """
    Transverse field Ising bond Hamiltonian -X_i X_j - h/2 (Z_i + Z_j), with
    transverse field split equally between the two sites. Critical for h = 1.
    """
    hm = -np.kron(sx, sx) - 0.5 * h_field * (np.kron(sz, eye2) + np.kron(eye2, sz))
    return hm.reshape(2, 2, 2, 2).astype(np.complex128)


def ising_exact_energy(h_field=1.0):
    """
    Exact ground state energy per site of the infinite transverse field Ising chain.
    """

    def eps(k):
        return np.sqrt(1.0 + h_field**2 - 2.0 * h_field * np.cos(k))

    return -scipy.integrate.quad(eps, 0.0, np.pi)[0] / np.pi


def shift_negative(h):
    """
    Shift a two-site Hamiltonian by its largest eigenvalue to make it negative
    semidefinite.

    Returns
    -------
    h_shifted : ndarray
        Shifted Hamiltonian, with same shape as h.
    normalization : callable
        Function mapping an energy of h_shifted to the corresponding energy of h.
    """
    d2 = h.shape[0] * h.shape[1]
    hm = h.reshape(d2, d2)
    if lg.norm(hm - hm.T.conj()) > 1e-12 * max(lg.norm(hm), 1.0):
        raise ValueError("Hamiltonian is not Hermitian")
    shift = lg.eigvalsh(hm)[-1]
    h_shifted = (hm - shift * np.eye(d2)).reshape(h.shape)

    def normalization(energy):
        return energy + shift

    return h_shifted, normalization
