r"""
Weighted kernel density evaluated at every cell's own coordinate.

For a feature with weights ``w`` the density at cell ``i`` is

    density(i) = sum_j w_j * K_H(x_i - x_j) / sum_j w_j

where the sum runs over all cells (cell ``i`` included) and ``K_H`` is the
product of one-dimensional kernels scaled by the per-dimension bandwidth.
The result is then rescaled with the package-wide normalization convention
(:func:`rescale`), the same one used for the joint density.
"""
import logging
from dataclasses import dataclass

import numpy as np

from .._settings import settings
from ..utils._enum import Normalization, DensityMethod
from ._checks import check_embedding, check_weights
from ._errors import InvalidInput, DimensionMismatch
from ._kernels import Kernel

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DensityResult:
    r"""Density of one feature, one value per cell in embedding order.

    Two results are equal when they share the feature name and all values.

    Attributes:
        feature: feature identifier (``'joint'`` for a combined result)
        values: read-only array of non-negative densities
    """
    feature: str
    values: np.ndarray

    def __post_init__(self):
        values = np.array(self.values, dtype=float).ravel()
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def __eq__(self, other):
        if not isinstance(other, DensityResult):
            return NotImplemented
        return self.feature == other.feature and np.array_equal(self.values, other.values)

    __hash__ = None

    def __len__(self):
        return self.values.shape[0]

    def __array__(self, dtype=None, copy=None):
        return self.values if dtype is None else self.values.astype(dtype)


def rescale(values, normalization=None) -> np.ndarray:
    r"""Apply the normalization convention to a density vector.

    Arguments:
        values: non-negative densities
        normalization: ``'max'``, ``'sum'`` or ``'none'``; ``None`` reads
            ``settings.normalization``

    Returns:
        A new array. A zero vector is returned unchanged for every mode.
    """
    normalization = Normalization(normalization or settings.normalization)
    values = np.array(values, dtype=float)
    if normalization == Normalization.NONE:
        return values
    scale = values.max() if normalization == Normalization.MAX else values.sum()
    if not scale > 0:
        return np.zeros_like(values)
    return values / scale


def _check_bandwidth(bandwidth, n_dims: int) -> np.ndarray:
    h = np.atleast_1d(np.asarray(bandwidth, dtype=float)).ravel()
    if h.shape[0] != n_dims:
        raise DimensionMismatch(
            f"Bandwidth has {h.shape[0]} entries, embedding has {n_dims} dimensions"
        )
    if not np.all(np.isfinite(h)) or np.any(h <= 0):
        raise InvalidInput(f"Bandwidth entries must be positive and finite, got {h}")
    return h


def kernel_matrix(targets, points, bandwidth, kernel="gaussian") -> np.ndarray:
    r"""Product-kernel weights between ``targets`` (m x d) and ``points`` (n x d).

    Returns:
        ``(m, n)`` array with ``K_H(targets[i] - points[j])``
    """
    kernel = Kernel(kernel)
    K = np.ones((targets.shape[0], points.shape[0]))
    for d, h in enumerate(bandwidth):
        K *= kernel.evaluate(targets[:, d, None] - points[None, :, d], h)
    return K


def _exact_density(emb, w, h, kernel, block_size):
    # zero-weight cells contribute nothing to any sum
    nz = w > 0
    points, w_nz = emb[nz], w[nz]
    out = np.empty(emb.shape[0])
    for start in range(0, emb.shape[0], block_size):
        stop = min(start + block_size, emb.shape[0])
        out[start:stop] = kernel_matrix(emb[start:stop], points, h, kernel) @ w_nz
    return out / w_nz.sum()


def grid_density(emb, w, h, kernel="gaussian", grid_size: int = 100) -> np.ndarray:
    r"""Weighted 2-D KDE on a regular grid, read back at each cell's grid node.

    The grid spans the data range with ``grid_size`` nodes per axis. Each
    cell takes the value of the node at the lower edge of the bin it falls
    in, so the result approximates the exact self-density at O(n * grid_size)
    cost instead of O(n^2).
    """
    kernel = Kernel(kernel)
    x, y = emb[:, 0], emb[:, 1]
    gx = np.linspace(x.min(), x.max(), grid_size)
    gy = np.linspace(y.min(), y.max(), grid_size)

    kx = kernel.evaluate(gx[:, None] - x[None, :], h[0])  # (grid_size, n_cells)
    ky = kernel.evaluate(gy[:, None] - y[None, :], h[1])
    z = (kx * w[None, :]) @ ky.T / w.sum()

    ix = np.clip(np.digitize(x, gx) - 1, 0, grid_size - 1)
    iy = np.clip(np.digitize(y, gy) - 1, 0, grid_size - 1)
    return z[ix, iy]


def weighted_density(
    embedding,
    weights,
    bandwidth,
    kernel: str = None,
    normalization: str = None,
    method: str = "exact",
    block_size: int = None,
    grid_size: int = 100,
    feature: str = "",
) -> DensityResult:
    r"""Weighted kernel density of one feature at every cell.

    Arguments:
        embedding: ``(n_cells, n_dims)`` coordinates
        weights: non-negative expression values aligned with ``embedding``
        bandwidth: :class:`Bandwidth` or array of length ``n_dims``
        kernel: kernel name, ``None`` reads ``settings.kernel``
        normalization: ``'max'``, ``'sum'`` or ``'none'``, ``None`` reads
            ``settings.normalization``
        method: ``'exact'`` pairwise sum or ``'grid'`` (2-D only)
        block_size: target cells per block for the exact sum, ``None``
            reads ``settings.block_size``
        grid_size: nodes per axis for ``method='grid'``
        feature: identifier stored on the result

    Returns:
        :class:`DensityResult` of length ``n_cells``. All-zero weights give
        an all-zero result.
    """
    emb = check_embedding(embedding)
    n_cells, n_dims = emb.shape
    w = check_weights(weights, n_cells, feature)
    h = _check_bandwidth(bandwidth, n_dims)
    kernel = Kernel(kernel or settings.kernel)
    method = DensityMethod(method)

    if not w.sum() > 0:
        logger.debug("'%s' has no expression, density is zero", feature)
        return DensityResult(feature, np.zeros(n_cells))

    if method == DensityMethod.GRID:
        if n_dims != 2:
            raise InvalidInput(f"method='grid' needs a 2-D embedding, got {n_dims}-D")
        if grid_size < 2:
            raise InvalidInput(f"grid_size must be at least 2, got {grid_size}")
        raw = grid_density(emb, w, h, kernel, grid_size)
    else:
        block_size = int(block_size or settings.block_size)
        if block_size < 1:
            raise InvalidInput(f"block_size must be positive, got {block_size}")
        raw = _exact_density(emb, w, h, kernel, block_size)

    return DensityResult(feature, rescale(raw, normalization))
