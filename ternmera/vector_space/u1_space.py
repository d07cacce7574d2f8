import numba
import numpy as np

from .vector_space import VectorSpace


@numba.njit
def _numba_combine_U1(reps, signature):
    nx = len(reps)
    c0 = np.int8(1 - 2 * signature[0]) * reps[0]
    for i in range(1, nx):
        n = reps[i].size
        rs = np.int8(1 - 2 * signature[i]) * reps[i]
        c1 = np.empty((c0.size * n,), dtype=np.int8)
        for j in range(c0.size):
            for k in range(n):
                c1[j * n + k] = c0[j] + rs[k]
        c0 = c1
    return c0


class U1_Space(VectorSpace):
    """
    Vector space graded by U(1) charges. The representation holds one int8 charge per
    basis state, in basis order.
    """

    _symmetry = "U1"

    @staticmethod
    def init_representation(rep):
        rep = np.ascontiguousarray(rep, dtype=np.int8)
        if rep.ndim != 1 or rep.size == 0:
            raise ValueError(f"Invalid U(1) representation {rep}")
        return rep

    @staticmethod
    def representation_dimension(rep):
        return rep.size

    @staticmethod
    def conjugate_representation(rep):
        return -rep

    @staticmethod
    def combine_representations(reps, signature):
        if len(reps) > 1:
            signature = np.ascontiguousarray(signature, dtype=np.int8)
            return _numba_combine_U1(tuple(reps), signature)
        return np.int8(1 - 2 * signature[0]) * reps[0]

    @staticmethod
    def representation_sectors(rep):
        irreps, degen = np.unique(rep, return_counts=True)
        return {int(c): int(n) for c, n in zip(irreps, degen)}

    @staticmethod
    def sectors_representation(sectors, rep):
        if not isinstance(sectors, dict):
            raise ValueError("U(1) expansion requires a dict charge -> degeneracy")
        old = U1_Space.representation_sectors(rep)
        extra = []
        for c, n in sorted(sectors.items()):
            n0 = old.get(int(c), 0)
            if n < n0:
                raise ValueError(f"Cannot reduce sector {c} from {n0} to {n}")
            extra.extend([c] * (n - n0))
        return np.concatenate((rep, np.array(extra, dtype=np.int8)))

    @classmethod
    def trivial_irrep(cls):
        return 0
