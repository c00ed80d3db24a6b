from collections.abc import Sequence
from typing import Iterator, List, Optional

import numpy as np
import pandas as pd

from ._density import DensityResult


class DensityResults(Sequence):
    r"""Ordered densities of one run: one per feature, then the joint result.

    Items are reachable by position or by feature name::

        >>> res = estimate_density(emb, {'CD8A': w1, 'CCR7': w2}, joint=True)
        >>> res.features
        ['CD8A', 'CCR7', 'joint']
        >>> res['CD8A'].values
    """

    def __init__(self, results: List[DensityResult], bandwidth=None, joint: Optional[str] = None):
        self._results = list(results)
        self._index = {r.feature: i for i, r in enumerate(self._results)}
        if len(self._index) != len(self._results):
            raise ValueError("Feature names in a result collection must be unique")
        self.bandwidth = bandwidth
        self.joint_key = joint

    def __getitem__(self, key):
        if isinstance(key, str):
            return self._results[self._index[key]]
        return self._results[key]

    def __len__(self):
        return len(self._results)

    def __iter__(self) -> Iterator[DensityResult]:
        return iter(self._results)

    def __contains__(self, key):
        if isinstance(key, str):
            return key in self._index
        return key in self._results

    @property
    def features(self) -> List[str]:
        return [r.feature for r in self._results]

    @property
    def joint(self) -> Optional[DensityResult]:
        r"""The combined result, ``None`` when joint mode was off."""
        if self.joint_key is None:
            return None
        return self[self.joint_key]

    def to_frame(self, index=None) -> pd.DataFrame:
        r"""One column per result in run order, one row per cell.

        Arguments:
            index: optional cell names for the rows
        """
        data = {r.feature: np.array(r.values) for r in self._results}
        return pd.DataFrame(data, index=index, columns=self.features)

    def __repr__(self):
        n_cells = len(self._results[0]) if self._results else 0
        return f"DensityResults(n_cells={n_cells}, features={self.features})"
