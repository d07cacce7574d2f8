from .trivial_space import TrivialSpace
from .u1_space import U1_Space

vector_space_types = {
    "trivial": TrivialSpace,
    "U1": U1_Space,
}


def get_vector_space_type(symmetry):
    try:
        return vector_space_types[symmetry]
    except KeyError as err:
        raise RuntimeError(f"Unknown symmetry '{symmetry}'") from err
