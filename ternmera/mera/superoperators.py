"""
Ascending and descending superoperators of a ternary MERA layer, acting on two-site
operators.

Layer tensors are stored as dense arrays:
- disentangler u with legs (out1, out2, in1, in2)
- isometry w with legs (out, in1, in2, in3)
- two-site operators and density matrices with legs (bra1, bra2, ket1, ket2)

Isometry outputs live on the coarse grained lattice, disentangler inputs on the finer
one. Below two neighboring isometries, the lower lattice sites read
    wL.in1, wL.in2, u.in1, u.in2, wR.in2, wR.in3
where the disentangler u feeds wL.in3 and wR.in1. A two-site operator sits on
(wL.in2, u.in1) for the left position, on (u.in1, u.in2) for the middle one and on
(u.in2, wR.in2) for the right one.
"""

from ..misc_tools import contract
from .mera_tools import UnknownAlignment

_left = frozenset(["l", "left", "L"])
_middle = frozenset(["m", "mid", "middle", "M"])
_right = frozenset(["r", "right", "R"])
_average = frozenset(["a", "avg", "average"])

_ascend_subscripts = {
    "l": "Aabc,Bdef,cdgh,bgij,jhkl,aikC,lefD->ABCD",
    "r": "Aabc,Bdef,cdgh,heij,gikl,abkC,ljfD->ABCD",
    "m": "Aabc,Bdef,cdgh,ghij,ijkl,abkC,lefD->ABCD",
}

_descend_subscripts = {
    "l": "Babc,dAbe,cfgh,ehij,idCk,jlfg,klDa->ABCD",
    "r": "aAbc,debf,cBgh,fhij,idek,jlDg,klaC->ABCD",
    "m": "ABab,cdae,bfgh,ehij,icdk,jlfg,klCD->ABCD",
}


def u_dagger(u):
    return u.transpose(2, 3, 0, 1).conj()


def w_dagger(w):
    return w.transpose(1, 2, 3, 0).conj()


def parse_position(pos):
    if pos in _left:
        return "l"
    if pos in _middle:
        return "m"
    if pos in _right:
        return "r"
    if pos in _average:
        return "a"
    raise UnknownAlignment(
        f"Unknown position '{pos}' (should be 'l', 'm', 'r' or 'avg')"
    )


def ascend_twosite(op, u, w, *, pos="avg"):
    """
    Ascend a two-site operator through one layer.

    Parameters
    ----------
    op : (D, D, D, D) ndarray
        Two-site operator at the layer input scale.
    u : (D, D, D, D) ndarray
        Layer disentangler.
    w : (Dout, D, D, D) ndarray
        Layer isometry.
    pos : str
        Position of op with respect to the disentangler: left, middle, right or average
        over the three positions. Default is average.

    Returns
    -------
    scaled_op : (Dout, Dout, Dout, Dout) ndarray
        Operator at the layer output scale.
    """
    pos = parse_position(pos)
    if pos == "a":
        ops = [ascend_twosite(op, u, w, pos=p) for p in "lrm"]
        return (ops[0] + ops[1] + ops[2]) / 3.0
    u_dg = u_dagger(u)
    w_dg = w_dagger(w)
    return contract(_ascend_subscripts[pos], w, w, u, op, u_dg, w_dg, w_dg)


def descend_twosite(rho, u, w, *, pos="avg"):
    """
    Descend a two-site density matrix through one layer. For any position, this is the
    adjoint of the ascending superoperator.

    Parameters
    ----------
    rho : (Dout, Dout, Dout, Dout) ndarray
        Two-site density matrix at the layer output scale.
    u : (D, D, D, D) ndarray
        Layer disentangler.
    w : (Dout, D, D, D) ndarray
        Layer isometry.
    pos : str
        Same as ascend_twosite.

    Returns
    -------
    scaled_rho : (D, D, D, D) ndarray
        Density matrix at the layer input scale.
    """
    pos = parse_position(pos)
    if pos == "a":
        rhos = [descend_twosite(rho, u, w, pos=p) for p in "lrm"]
        return (rhos[0] + rhos[1] + rhos[2]) / 3.0
    u_dg = u_dagger(u)
    w_dg = w_dagger(w)
    return contract(_descend_subscripts[pos], u_dg, w_dg, w_dg, rho, w, w, u)
