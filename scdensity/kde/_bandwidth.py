r"""
Bandwidth selection.

The bandwidth is a positive scale per embedding dimension. It is computed once
per embedding and reused for every feature evaluated against it.
"""
import logging
from dataclasses import dataclass

import numpy as np

from .._settings import settings
from ..utils._enum import BandwidthRule
from ._checks import check_embedding
from ._errors import InvalidInput, DimensionMismatch, DegenerateBandwidth

logger = logging.getLogger(__name__)

# IQR of the standard normal
_IQR_NORMAL = 1.349


@dataclass(frozen=True, eq=False)
class Bandwidth:
    r"""Per-dimension kernel widths.

    Attributes:
        values: positive array of length ``n_dims``
        rule: name of the rule that produced it, ``'user'`` for overrides
    """
    values: np.ndarray
    rule: str = "user"

    def __post_init__(self):
        values = np.array(self.values, dtype=float).ravel()
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def __eq__(self, other):
        if not isinstance(other, Bandwidth):
            return NotImplemented
        return self.rule == other.rule and np.array_equal(self.values, other.values)

    __hash__ = None

    @property
    def n_dims(self) -> int:
        return self.values.shape[0]

    def __len__(self):
        return self.n_dims

    def __array__(self, dtype=None, copy=None):
        return self.values if dtype is None else self.values.astype(dtype)


def robust_scale(x: np.ndarray) -> float:
    r"""``min(std, IQR / 1.349)``, falling back to ``std`` when the IQR is zero."""
    std = float(np.std(x, ddof=1))
    q75, q25 = np.percentile(x, [75, 25])
    iqr = float(q75 - q25) / _IQR_NORMAL
    if iqr > 0:
        return min(std, iqr)
    return std


def _rule_factor(rule: BandwidthRule, n_cells: int, n_dims: int) -> float:
    if rule == BandwidthRule.SILVERMAN:
        return (4.0 / ((n_dims + 2.0) * n_cells)) ** (1.0 / (n_dims + 4.0))
    return n_cells ** (-1.0 / (n_dims + 4.0))


def select_bandwidth(
    embedding,
    bw=None,
    rule: str = "silverman",
    adjust: float = 1.0,
    floor: float = None,
) -> Bandwidth:
    r"""Select the kernel bandwidth for an embedding.

    Arguments:
        embedding: ``(n_cells, n_dims)`` array of cell coordinates
        bw: optional override, a positive scalar (isotropic) or a vector of
            length ``n_dims``. When given, ``rule`` is ignored.
        rule: ``'silverman'`` (default) or ``'scott'``. Silverman uses
            ``sigma * (4 / ((d + 2) n)) ** (1 / (d + 4))``, Scott
            ``sigma * n ** (-1 / (d + 4))``, with ``sigma`` the robust
            spread of each dimension.
        adjust: multiplier applied to the selected bandwidth
        floor: bandwidth used for dimensions with zero spread. ``None``
            uses ``settings.bw_floor``; a non-positive value (or a
            ``settings.bw_floor`` of ``None``) raises
            :class:`DegenerateBandwidth` instead.

    Returns:
        :class:`Bandwidth`
    """
    emb = check_embedding(embedding, min_cells=2)
    n_cells, n_dims = emb.shape
    if floor is None:
        floor = settings.bw_floor
    if not np.isfinite(adjust) or adjust <= 0:
        raise InvalidInput(f"adjust must be positive, got {adjust}")

    if bw is not None:
        values = np.atleast_1d(np.asarray(bw, dtype=float)).ravel()
        if values.shape[0] == 1:
            values = np.repeat(values, n_dims)
        if values.shape[0] != n_dims:
            raise DimensionMismatch(
                f"Bandwidth has {values.shape[0]} entries, embedding has {n_dims} dimensions"
            )
        if not np.all(np.isfinite(values)) or np.any(values <= 0):
            raise InvalidInput(f"Bandwidth entries must be positive and finite, got {values}")
        return Bandwidth(values * adjust, rule="user")

    rule = BandwidthRule(rule)
    factor = _rule_factor(rule, n_cells, n_dims)
    scales = np.array([robust_scale(emb[:, d]) for d in range(n_dims)])
    values = scales * factor * adjust

    degenerate = ~(values > 0)
    if np.any(degenerate):
        dims = np.flatnonzero(degenerate).tolist()
        if floor is None or floor <= 0:
            raise DegenerateBandwidth(
                f"Embedding dimension(s) {dims} have zero spread and no bandwidth floor is set"
            )
        logger.debug("Zero spread in dimension(s) %s, using bandwidth floor %g", dims, floor)
        values[degenerate] = floor

    logger.debug("%s bandwidth for %d cells x %d dims: %s", rule, n_cells, n_dims, values)
    return Bandwidth(values, rule=str(rule))
