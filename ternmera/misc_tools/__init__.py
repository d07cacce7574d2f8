from .contract_tools import contract, contraction_path
from .eig_tools import dominant_eigenvector
from .svd_tools import polar_isometry, random_isometry, robust_svd

__all__ = [
    "contract",
    "contraction_path",
    "dominant_eigenvector",
    "polar_isometry",
    "random_isometry",
    "robust_svd",
]
