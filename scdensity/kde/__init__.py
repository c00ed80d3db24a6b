r"""
Weighted kernel density estimation over cell embeddings.

Each feature's per-cell expression is smoothed over the embedding with a
weighted KDE evaluated at every cell's own coordinate, which compensates
for dropout when expression is shown on a UMAP/t-SNE/PCA scatter. Several
features can be combined into a joint (co-expression) density.

Key components:
    select_bandwidth: per-dimension bandwidth (Silverman/Scott or override)
    Kernel: gaussian, epanechnikov, uniform and triangular kernels
    weighted_density: density of one feature at every cell
    joint_density: product combination of several densities
    WeightedKDEEngine, estimate_density: end-to-end orchestration

Examples:
    >>> import scdensity as scd
    >>> res = scd.kde.estimate_density(emb, {'CD8A': cd8a, 'CCR7': ccr7}, joint=True)
    >>> res.to_frame()
"""

from ._errors import DensityError, InvalidInput, DimensionMismatch, DegenerateBandwidth
from ._kernels import Kernel
from ._bandwidth import Bandwidth, select_bandwidth, robust_scale
from ._density import DensityResult, weighted_density, grid_density, kernel_matrix, rescale
from ._joint import joint_density
from ._results import DensityResults
from ._engine import WeightedKDEEngine, estimate_density, as_feature_set

__all__ = [
    "DensityError",
    "InvalidInput",
    "DimensionMismatch",
    "DegenerateBandwidth",
    "Kernel",
    "Bandwidth",
    "select_bandwidth",
    "robust_scale",
    "DensityResult",
    "weighted_density",
    "grid_density",
    "kernel_matrix",
    "rescale",
    "joint_density",
    "DensityResults",
    "WeightedKDEEngine",
    "estimate_density",
    "as_feature_set",
]
