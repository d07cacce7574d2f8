import numpy as np

# numpy default memory limit forbids intermediates larger than the largest input,
# which forces a single expensive final contraction
_MEMORY_LIMIT = 2**62

_path_cache = {}


def contraction_path(subscripts, *operands):
    """
    Pairwise contraction order for np.einsum, computed once for a given subscript
    string and operand shapes and stored afterwards.
    """
    key = (subscripts, tuple(op.shape for op in operands))
    path = _path_cache.get(key)
    if path is None:
        path, _ = np.einsum_path(
            subscripts, *operands, optimize=("greedy", _MEMORY_LIMIT)
        )
        _path_cache[key] = path
    return path


def contract(subscripts, *operands):
    """
    Evaluate np.einsum(subscripts, *operands) with a pairwise contraction order that
    is not constrained by intermediate size.
    """
    path = contraction_path(subscripts, *operands)
    return np.einsum(subscripts, *operands, optimize=path)
