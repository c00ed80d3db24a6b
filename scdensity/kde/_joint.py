import numpy as np

from ._density import DensityResult, rescale
from ._errors import InvalidInput, DimensionMismatch


def joint_density(results, normalization: str = None, feature: str = "joint") -> DensityResult:
    r"""Combine per-feature densities into a co-expression density.

    The joint value of a cell is the product of its per-feature densities,
    rescaled with the same normalization convention as the inputs. A cell
    only scores high when it scores high for every feature.

    For ``'max'`` and ``'sum'`` the result does not depend on whether the
    inputs were already rescaled, since the per-feature scale factors
    cancel in the final rescaling.

    Arguments:
        results: sequence of at least two :class:`DensityResult` (or arrays)
            of equal length
        normalization: ``'max'``, ``'sum'`` or ``'none'``, ``None`` reads
            ``settings.normalization``
        feature: identifier of the combined result

    Returns:
        :class:`DensityResult`
    """
    results = list(results)
    if len(results) == 0:
        raise InvalidInput("Joint density needs at least two features, got none")
    if len(results) == 1:
        raise InvalidInput("Joint density needs at least two features, got one")

    values = [np.asarray(r, dtype=float).ravel() for r in results]
    n_cells = values[0].shape[0]
    for r, v in zip(results, values):
        if v.shape[0] != n_cells:
            name = getattr(r, "feature", "?")
            raise DimensionMismatch(
                f"Density '{name}' has length {v.shape[0]}, expected {n_cells}"
            )

    joint = np.prod(np.vstack(values), axis=0)
    return DensityResult(feature, rescale(joint, normalization))
