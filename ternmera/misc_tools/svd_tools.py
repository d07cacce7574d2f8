import numpy as np
import scipy.linalg as lg


def robust_svd(a, *, compute_vectors=True):
    """
    Wrapper for scipy.linalg.svd. Catch a LinAlgError and retries with another driver.

    Parameters
    ----------
    a : ndarray with shape (m, n)
        Dense matrix to decompose.
    compute_vectors: bool
        Whether to compute singular vectors. Default is True.

    Returns
    -------
    u : ndarray with shape (m, min(m, n))
        Unitary matrix having left singular vectors as columns.
    s : ndarray with shape (min(m,n),)
        The singular values, sorted in non-increasing order.
    v : ndarray with shape (min(m, n), n)
        Unitary matrix having right singular vectors as rows.

    For compute_vectors=False, only s is returned.
    """
    try:
        out = lg.svd(
            a, full_matrices=False, compute_uv=compute_vectors, lapack_driver="gesdd"
        )
    except lg.LinAlgError as err:
        print(f"Warning: svd: gesdd failed with {err}. Try gesvd")
        out = lg.svd(
            a,
            full_matrices=False,
            compute_uv=compute_vectors,
            check_finite=False,
            lapack_driver="gesvd",
        )
    return out


def polar_isometry(env, n_row_legs, row_irreps=None, col_irreps=None):
    """
    Isometry t maximizing Re(sum(env * t)), with rows given by the n_row_legs first
    legs of env and columns by the others.

    Parameters
    ----------
    env : ndarray
        Environment tensor, with the same shape as the isometry to find.
    n_row_legs : int
        Number of legs in the row bipartition.
    row_irreps : 1D integer array
        Irrep of each row. If provided, the decomposition is done independently in
        each block of rows and columns sharing the same irrep and coefficients outside
        blocks are set to zero.
    col_irreps : 1D integer array
        Irrep of each column. Only read if row_irreps is provided.

    Returns
    -------
    t : ndarray
        Tensor with env shape. Once reshaped as a matrix, it has orthonormal rows if
        it has less rows than columns, orthonormal columns otherwise.
    """
    m = np.prod(env.shape[:n_row_legs])
    mat = env.reshape(m, -1)
    if row_irreps is None:
        u, _, v = robust_svd(mat)
        return (u @ v).conj().reshape(env.shape)

    iso = np.zeros(mat.shape, dtype=np.complex128)
    for irr in np.unique(row_irreps):
        ri = (row_irreps == irr).nonzero()[0]
        ci = (col_irreps == irr).nonzero()[0]
        if ci.size:
            block = np.ix_(ri, ci)
            u, _, v = robust_svd(mat[block])
            iso[block] = u @ v
    return iso.conj().reshape(env.shape)


def random_isometry(mask, rng):
    """
    Random complex isometry whose coefficients vanish outside mask. Rows are defined by
    mask first axis, columns by the others.

    Rows of a matrix restricted to a mask block are only orthonormal if every row
    sector fits in the matching column sector.
    """
    shape = mask.shape
    m = mask.reshape(shape[0], -1)
    rows, cols = m.shape
    if rows > cols:
        raise ValueError(f"Cannot build isometry with {rows} rows and {cols} columns")
    a = rng.normal(size=m.shape) + 1j * rng.normal(size=m.shape)
    a[~m] = 0
    if np.linalg.matrix_rank(a) < rows:
        raise ValueError("Symmetry sectors do not allow an isometry")
    iso = polar_isometry(a, 1).conj()
    iso[~m] = 0
    return iso.reshape(shape)
