r"""
Smoothing kernels.

Every kernel is a member of :class:`Kernel` and is used through one call,
``Kernel(name).evaluate(distance, bandwidth)``, which returns the scaled
one-dimensional weight ``k(distance / bandwidth) / bandwidth``. Each ``k``
integrates to one, so a product over dimensions integrates to one as well.
"""
import numpy as np
from scipy.stats import norm

from ..utils._enum import ModeEnum


class Kernel(ModeEnum):
    r"""Supported smoothing kernels.

    Examples:
        >>> Kernel('gaussian').evaluate(np.array([0.0, 1.0]), 1.0)
        array([0.39894228, 0.24197072])
    """
    GAUSSIAN = "gaussian"
    EPANECHNIKOV = "epanechnikov"
    UNIFORM = "uniform"
    TRIANGULAR = "triangular"

    def evaluate(self, distance, bandwidth):
        r"""Kernel weight for signed ``distance`` at the given ``bandwidth``.

        Arguments:
            distance: scalar or array of coordinate differences
            bandwidth: positive scalar

        Returns:
            Array of non-negative weights with the shape of ``distance``
        """
        u = np.asarray(distance, dtype=float) / bandwidth
        return _PROFILES[self](u) / bandwidth

    @property
    def compact(self) -> bool:
        r"""Whether the kernel vanishes for ``|u| > 1``."""
        return self is not Kernel.GAUSSIAN


def _gaussian(u):
    return norm.pdf(u)


def _epanechnikov(u):
    return np.where(np.abs(u) <= 1, 0.75 * (1.0 - u * u), 0.0)


def _uniform(u):
    return np.where(np.abs(u) <= 1, 0.5, 0.0)


def _triangular(u):
    return np.clip(1.0 - np.abs(u), 0.0, None)


_PROFILES = {
    Kernel.GAUSSIAN: _gaussian,
    Kernel.EPANECHNIKOV: _epanechnikov,
    Kernel.UNIFORM: _uniform,
    Kernel.TRIANGULAR: _triangular,
}
