import numpy as np


class VectorSpace:
    """
    Vector space attached to a tensor leg. A space is defined by a representation of
    its symmetry group and by a duality flag. Representations follow symmetric tensor
    conventions: they are numpy arrays whose content depends on the symmetry.

    Subclasses have to implement the symmetry specific static methods. Everything
    else, including expansion of a space with new sectors, is defined in terms of
    them.
    """

    _symmetry = NotImplemented

    ####################################################################################
    # Symmetry specific methods with fixed signature
    ####################################################################################
    @classmethod
    def symmetry(cls):
        return cls._symmetry

    @staticmethod
    def init_representation(rep):
        raise NotImplementedError("Must be defined in derived class")

    @staticmethod
    def representation_dimension(rep):
        raise NotImplementedError("Must be defined in derived class")

    @staticmethod
    def conjugate_representation(rep):
        raise NotImplementedError("Must be defined in derived class")

    @staticmethod
    def combine_representations(reps, signature):
        raise NotImplementedError("Must be defined in derived class")

    @staticmethod
    def representation_sectors(rep):
        raise NotImplementedError("Must be defined in derived class")

    @staticmethod
    def sectors_representation(sectors, rep):
        """
        Representation obtained by enlarging rep to fit sectors. rep has to be the
        leading part of the new representation.
        """
        raise NotImplementedError("Must be defined in derived class")

    @classmethod
    def trivial_irrep(cls):
        raise NotImplementedError("Must be defined in derived class")

    ####################################################################################
    # Initializer
    ####################################################################################
    def __init__(self, rep, *, dual=False):
        self._representation = self.init_representation(rep)
        self._dual = bool(dual)

    @property
    def representation(self):
        return self._representation

    @property
    def dim(self):
        return int(self.representation_dimension(self._representation))

    @property
    def is_dual(self):
        return self._dual

    def __repr__(self):
        s = "'" if self._dual else ""
        return f"{type(self).__name__}({self._representation}){s}"

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        if self._dual != other._dual:
            return False
        r1, r2 = self._representation, other._representation
        return r1.shape == r2.shape and bool((r1 == r2).all())

    def __hash__(self):
        return hash((type(self), self._dual, self._representation.tobytes()))

    def dual(self):
        return type(self)(self._representation, dual=not self._dual)

    def leg_representation(self):
        """
        Representation seen from a tensor leg: conjugated for a dual space.
        """
        if self._dual:
            return self.conjugate_representation(self._representation)
        return self._representation

    def sectors(self):
        """
        Dictionary irrep -> degeneracy.
        """
        return self.representation_sectors(self._representation)

    def expand(self, newdims):
        """
        Return a larger space where the sectors in newdims have the given
        degeneracies. Sectors not in newdims keep their current degeneracy. The
        current space is the leading subspace of the returned one.

        Parameters
        ----------
        newdims : dict or int
            New degeneracy for each sector to change.
        """
        rep = self.sectors_representation(newdims, self._representation)
        return type(self)(rep, dual=self._dual)


def combine_spaces(spaces):
    """
    Irreps of each basis state of the tensor product of spaces, in C order. Dual spaces
    enter with conjugated representations.
    """
    st_type = type(spaces[0])
    if any(type(V) is not st_type for V in spaces):
        raise ValueError("Cannot combine spaces with different symmetries")
    reps = tuple(V.representation for V in spaces)
    signature = np.array([V.is_dual for V in spaces])
    return st_type.combine_representations(reps, signature)


def allowed_mask(spaces):
    """
    Boolean array with shape given by space dimensions, True where a tensor coefficient
    is allowed by the symmetry.
    """
    st_type = type(spaces[0])
    shape = tuple(V.dim for V in spaces)
    combined = combine_spaces(spaces)
    return (combined == st_type.trivial_irrep()).reshape(shape)
