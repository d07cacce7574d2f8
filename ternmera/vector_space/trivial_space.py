import numpy as np

from .vector_space import VectorSpace


class TrivialSpace(VectorSpace):
    """
    Vector space without any symmetry, only defined by its dimension.
    """

    _symmetry = "trivial"

    @staticmethod
    def init_representation(rep):
        rep = np.atleast_1d(np.asarray(rep, dtype=int))
        if rep.shape != (1,) or rep[0] < 1:
            raise ValueError(f"Invalid trivial representation {rep}")
        return rep

    @staticmethod
    def representation_dimension(rep):
        return rep[0]

    @staticmethod
    def conjugate_representation(rep):
        return rep

    @staticmethod
    def combine_representations(reps, signature):
        return np.zeros((np.prod([r[0] for r in reps]),), dtype=np.int8)

    @staticmethod
    def representation_sectors(rep):
        return {0: int(rep[0])}

    @staticmethod
    def sectors_representation(sectors, rep):
        if isinstance(sectors, dict):
            if len(sectors) != 1:
                raise ValueError("Trivial space has only one sector")
            (d,) = sectors.values()
        else:
            d = sectors
        d = int(d)
        if d < rep[0]:
            raise ValueError(f"Cannot reduce dimension from {rep[0]} to {d}")
        return np.array([d])

    @classmethod
    def trivial_irrep(cls):
        return 0
