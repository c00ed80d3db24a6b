r"""
Orchestration of bandwidth selection, per-feature evaluation and joint
combination.
"""
import logging
import time
from collections.abc import Mapping
from typing import Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from .._settings import settings
from ..utils._enum import Backend, BandwidthRule, DensityMethod, Normalization
from ._bandwidth import Bandwidth, select_bandwidth
from ._checks import _to_dense, check_embedding, check_weights
from ._density import DensityResult, weighted_density
from ._errors import InvalidInput
from ._joint import joint_density
from ._kernels import Kernel
from ._results import DensityResults

logger = logging.getLogger(__name__)


def as_feature_set(features, names: Optional[Sequence[str]] = None) -> Dict[str, np.ndarray]:
    r"""Normalize the accepted feature containers to an ordered ``{name: vector}``.

    Accepts a DataFrame (one column per feature), a Series, a mapping, or
    a 1-D / 2-D array with optional ``names`` for its columns.
    """
    if isinstance(features, pd.DataFrame):
        items = [(str(c), features[c].to_numpy()) for c in features.columns]
    elif isinstance(features, pd.Series):
        items = [(str(features.name) if features.name is not None else "feature", features.to_numpy())]
    elif isinstance(features, Mapping):
        items = [(str(k), v) for k, v in features.items()]
    else:
        arr = _to_dense(features)
        if arr.ndim == 1:
            arr = arr[:, None]
        if arr.ndim != 2:
            raise InvalidInput(f"Feature matrix must be 1-D or 2-D, got {arr.ndim}-D")
        if names is None:
            names = [f"feature_{i}" for i in range(arr.shape[1])]
        names = list(names)
        if len(names) != arr.shape[1]:
            raise InvalidInput(f"Got {len(names)} names for {arr.shape[1]} feature columns")
        items = [(str(n), arr[:, i]) for i, n in enumerate(names)]

    if len(items) == 0:
        raise InvalidInput("No features requested")
    feature_set = dict(items)
    if len(feature_set) != len(items):
        raise InvalidInput(f"Duplicate feature names: {[k for k, _ in items]}")
    return feature_set


class WeightedKDEEngine:
    r"""
    Weighted kernel density of gene expression over a cell embedding.

    The engine only holds configuration; every call works on the inputs it
    is given, so one engine can be reused across datasets and threads.

    Arguments:
        kernel: ``'gaussian'``, ``'epanechnikov'``, ``'uniform'`` or
            ``'triangular'``. Default: ``settings.kernel``
        bw: bandwidth override, scalar or one value per dimension
        rule: bandwidth rule when ``bw`` is None, ``'silverman'`` or ``'scott'``
        adjust: multiplier on the bandwidth
        bw_floor: bandwidth for zero-spread dimensions. Default: ``settings.bw_floor``
        normalization: ``'max'``, ``'sum'`` or ``'none'``. Default: ``settings.normalization``
        method: ``'exact'`` or ``'grid'`` (2-D only)
        grid_size: grid nodes per axis for ``method='grid'``
        n_jobs: workers for per-feature evaluation. Default: ``settings.n_jobs``
        backend: joblib backend. Default: ``settings.backend``
        block_size: target cells per block. Default: ``settings.block_size``
        joint_key: name of the joint result

    Examples:
        >>> engine = WeightedKDEEngine(adjust=1.5)
        >>> res = engine.run(adata.obsm['X_umap'], {'CD8A': cd8a, 'CCR7': ccr7}, joint=True)
        >>> res['joint'].values
    """

    def __init__(
        self,
        kernel: Optional[str] = None,
        bw: Union[float, Sequence[float], None] = None,
        rule: str = "silverman",
        adjust: float = 1.0,
        bw_floor: Optional[float] = None,
        normalization: Optional[str] = None,
        method: str = "exact",
        grid_size: int = 100,
        n_jobs: Optional[int] = None,
        backend: Optional[str] = None,
        block_size: Optional[int] = None,
        joint_key: str = "joint",
    ):
        self.kernel = Kernel(kernel or settings.kernel)
        self.bw = bw
        self.rule = BandwidthRule(rule)
        self.adjust = adjust
        self.bw_floor = bw_floor
        self.normalization = Normalization(normalization or settings.normalization)
        self.method = DensityMethod(method)
        self.grid_size = grid_size
        self.n_jobs = n_jobs
        self.backend = Backend(backend or settings.backend)
        self.block_size = block_size
        self.joint_key = joint_key

    def bandwidth(self, embedding) -> Bandwidth:
        r"""Bandwidth for ``embedding`` under this engine's configuration."""
        return select_bandwidth(
            embedding, bw=self.bw, rule=self.rule, adjust=self.adjust, floor=self.bw_floor
        )

    def evaluate(self, embedding, weights, bandwidth=None, feature: str = "") -> DensityResult:
        r"""Density of a single feature; the bandwidth is selected when not given."""
        if bandwidth is None:
            bandwidth = self.bandwidth(embedding)
        return weighted_density(
            embedding,
            weights,
            bandwidth,
            kernel=self.kernel,
            normalization=self.normalization,
            method=self.method,
            block_size=self.block_size,
            grid_size=self.grid_size,
            feature=feature,
        )

    def combine(self, results) -> DensityResult:
        r"""Joint density of two or more per-feature results."""
        return joint_density(results, normalization=self.normalization, feature=self.joint_key)

    def _resolve_n_jobs(self, n_features: int) -> int:
        n_jobs = settings.n_jobs if self.n_jobs is None else self.n_jobs
        if n_jobs == -1:
            n_jobs = n_features
        if n_jobs < 1:
            raise InvalidInput(f"n_jobs must be -1 or a positive integer, got {n_jobs}")
        return min(int(n_jobs), n_features)

    def run(self, embedding, features, joint: bool = False, names=None, progress: bool = False) -> DensityResults:
        r"""Densities for every feature, plus the joint density when requested.

        Arguments:
            embedding: ``(n_cells, n_dims)`` coordinates
            features: DataFrame, mapping or matrix of per-cell weights, see
                :func:`as_feature_set`
            joint: append the joint density after the per-feature results
            names: column names when ``features`` is an array
            progress: show a progress bar for sequential runs

        Returns:
            :class:`DensityResults` in feature order, joint last. Any
            invalid feature fails the whole call.
        """
        emb = check_embedding(embedding, min_cells=2)
        n_cells = emb.shape[0]
        feature_set = as_feature_set(features, names)
        if joint:
            if len(feature_set) < 2:
                raise InvalidInput(
                    f"joint=True needs at least two features, got {len(feature_set)}"
                )
            if self.joint_key in feature_set:
                raise InvalidInput(f"Feature name '{self.joint_key}' clashes with the joint result")

        # validate every feature before any evaluation starts
        weights = {name: check_weights(w, n_cells, name) for name, w in feature_set.items()}
        bw = self.bandwidth(emb)
        n_jobs = self._resolve_n_jobs(len(weights))

        logger.debug(
            "Evaluating %d feature(s) on %d cells x %d dims (kernel=%s, bw=%s, n_jobs=%d)",
            len(weights), n_cells, emb.shape[1], self.kernel, bw.values, n_jobs,
        )
        start = time.time()
        if n_jobs == 1:
            results = [
                self.evaluate(emb, w, bw, feature=name)
                for name, w in tqdm(weights.items(), total=len(weights),
                                    desc="Weighted KDE", disable=not progress)
            ]
        else:
            results = Parallel(n_jobs=n_jobs, backend=str(self.backend))(
                delayed(self.evaluate)(emb, w, bw, feature=name) for name, w in weights.items()
            )
        logger.debug("Per-feature densities done in %.3fs", time.time() - start)

        if joint:
            results.append(self.combine(results))
        return DensityResults(results, bandwidth=bw, joint=self.joint_key if joint else None)

    def __repr__(self):
        return (
            f"WeightedKDEEngine(kernel={self.kernel}, rule={self.rule}, adjust={self.adjust}, "
            f"normalization={self.normalization}, method={self.method})"
        )


def estimate_density(embedding, features, joint: bool = False, names=None, **kwargs) -> DensityResults:
    r"""Weighted KDE of each feature over ``embedding``, optionally with the joint density.

    Shortcut for ``WeightedKDEEngine(**kwargs).run(embedding, features, joint)``.

    Arguments:
        embedding: ``(n_cells, n_dims)`` coordinates
        features: DataFrame, mapping or matrix of non-negative per-cell weights
        joint: append the product density of all features
        names: column names when ``features`` is an array
        **kwargs: :class:`WeightedKDEEngine` options

    Returns:
        :class:`DensityResults`
    """
    return WeightedKDEEngine(**kwargs).run(embedding, features, joint=joint, names=names)
