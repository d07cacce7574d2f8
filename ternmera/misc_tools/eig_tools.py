import numpy as np
import scipy.linalg as lg
import scipy.sparse.linalg as slg


def dominant_eigenvector(matvec, x0, *, dmax_full=100, maxiter=4000, tol=0):
    """
    Find eigenvector with largest eigenvalue magnitude of a square matrix only defined
    by its action on a vector.

    Parameters
    ----------
    matvec : callable
        Action of the matrix on a tensor with the shape of x0.
    x0 : ndarray
        Initial guess. Its shape defines the shape of the vectors matvec acts on.
    dmax_full : int
        Maximum vector size to use dense eig. Default is 100.
    maxiter : int
        Maximum number of Arnoldi update iterations allowed in Arpack.
    tol : float
        Arpack tol.

    Returns
    -------
    val : complex
        Dominant eigenvalue.
    vec : ndarray
        Eigenvector with x0 shape. Its normalization and phase are arbitrary.
    """
    shape = x0.shape
    n = x0.size
    dtype = np.complex128

    def flat_matvec(x):
        return matvec(x.reshape(shape)).ravel()

    if n <= dmax_full:
        # construct the dense matrix column by column
        mat = np.empty((n, n), dtype=dtype)
        x = np.zeros((n,), dtype=dtype)
        for i in range(n):
            x[i] = 1.0
            mat[:, i] = flat_matvec(x)
            x[i] = 0.0
        vals, vecs = lg.eig(mat)
        i = np.abs(vals).argmax()
        return vals[i], vecs[:, i].reshape(shape)

    op = slg.LinearOperator(matvec=flat_matvec, shape=(n, n), dtype=dtype)
    vals, vecs = slg.eigs(
        op, k=1, which="LM", v0=x0.ravel().astype(dtype), maxiter=maxiter, tol=tol
    )
    return vals[0], vecs[:, 0].reshape(shape)
