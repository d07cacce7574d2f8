import numpy as np
import scipy.linalg as lg

from ternmera.config import ASSERT_TOL
from ternmera.vector_space import combine_spaces


class StructuralInvariantViolation(ValueError):
    """
    Bond dimensions or vector spaces do not match inside a MERA.
    """


class InvalidScaleRange(ValueError):
    """
    Scales given in the wrong order to ascend or descend an operator.
    """


class UnknownAlignment(ValueError):
    """
    Unknown position of a two-site operator with respect to a MERA layer.
    """


def u_leg_spaces(vin):
    return (vin, vin, vin.dual(), vin.dual())


def w_leg_spaces(vin, vout):
    return (vout, vin.dual(), vin.dual(), vin.dual())


def check_leg_dimensions(t, spaces):
    return t.shape == tuple(V.dim for V in spaces)


def intralayer_match(u, w):
    # disentangler outputs enter the isometry as its last and middle legs
    return u.ndim == 4 and w.ndim == 4 and u.shape[:2] == (w.shape[3], w.shape[2])


def interlayer_match(w, unext):
    if unext.ndim != 4:
        return False
    return w.shape[0] == unext.shape[2] and w.shape[0] == unext.shape[3]


def isometry_sectors_fit(vin, vout):
    """
    Whether an isometry from vin x vin x vin to vout can have orthonormal rows: every
    irrep of vout needs at least as many states in vin x vin x vin.
    """
    rows = combine_spaces((vout,))
    cols = combine_spaces((vin, vin, vin))
    irreps, counts = np.unique(rows, return_counts=True)
    return all((cols == irr).sum() >= n for (irr, n) in zip(irreps, counts))


def pad_with_zeros(t, axis, new_dim):
    """
    Return a copy of t where axis has size new_dim. Existing coefficients are kept in
    the leading part, new ones are set to zero. t is returned unchanged if axis already
    has size new_dim.
    """
    old_dim = t.shape[axis]
    if new_dim == old_dim:
        return t
    if new_dim < old_dim:
        raise ValueError(f"Cannot pad axis {axis} from {old_dim} to {new_dim}")
    pad_width = [(0, 0)] * t.ndim
    pad_width[axis] = (0, new_dim - old_dim)
    padded = np.pad(t, pad_width)
    assert check_norm(padded, t)
    return padded


def check_norm(t1, t2, *, tol=ASSERT_TOL):
    n1 = lg.norm(t1)
    n2 = lg.norm(t2)
    dn = abs(n1 - n2)
    b = dn > tol * max(n1, n2)
    if b:
        print(f"WARNING: norm is different: {dn:.1e} > {tol * max(n1, n2):.1e}")
    return not b


def check_hamiltonian(h, vin):
    """
    Check h is a two-site operator acting on vin x vin.
    """
    d = vin.dim
    if not isinstance(h, np.ndarray):
        raise ValueError("Hamiltonian must be a numpy array")
    if h.shape != (d, d, d, d):
        raise ValueError(
            f"Hamiltonian shape {h.shape} does not match input space dimension {d}"
        )


def check_parameters(pars, default_parameters):
    """
    Complete pars with default values and check them.
    """
    unknown = set(pars) - set(default_parameters)
    if unknown:
        raise ValueError(f"Unknown optimization parameters: {sorted(unknown)}")
    checked = {}
    for key, default in default_parameters.items():
        val = pars.get(key, default)
        if key == "rho_delta":
            val = float(val)
            if not val >= 0:
                raise ValueError(f"rho_delta must be non-negative, got {val}")
        else:
            if int(val) != val:
                raise ValueError(f"{key} must be an integer, got {val}")
            val = int(val)
            if val < 0:
                raise ValueError(f"{key} must be non-negative, got {val}")
        checked[key] = val
    return checked
