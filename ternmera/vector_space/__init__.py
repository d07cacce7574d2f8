from .tools import get_vector_space_type
from .trivial_space import TrivialSpace
from .u1_space import U1_Space
from .vector_space import VectorSpace, allowed_mask, combine_spaces

__all__ = [
    "TrivialSpace",
    "U1_Space",
    "VectorSpace",
    "allowed_mask",
    "combine_spaces",
    "get_vector_space_type",
]
