r"""
scdensity: weighted kernel density estimation of gene expression on
single-cell embeddings.

Sparse single-cell measurements make per-cell expression plots noisy and
zero-inflated. scdensity smooths each gene over the embedding with a
weighted kernel density estimate evaluated at every cell, and combines
several genes into a joint co-expression density.

Main modules:
    kde: the numeric engine (bandwidth, kernels, weighted density, joint)
    single: AnnData entry point writing densities to ``adata.obs``
    utils: option enumerations and logging configuration

Examples:
    >>> import scdensity as scd
    >>> res = scd.estimate_density(adata.obsm['X_umap'], {'CD8A': cd8a, 'CCR7': ccr7}, joint=True)
    >>> res.to_frame()
    >>>
    >>> scd.single.calculate_density(adata, ['CD8A', 'CCR7'], basis='umap', joint=True)
"""

from importlib.metadata import version

from . import kde
from . import single
from . import utils

from .kde import (
    WeightedKDEEngine,
    estimate_density,
    DensityResult,
    DensityResults,
    DensityError,
    InvalidInput,
    DimensionMismatch,
    DegenerateBandwidth,
)

name = "scdensity"
try:
    __version__ = version(name)
except Exception:
    __version__ = "unknown"

from ._settings import settings, generate_reference_table
