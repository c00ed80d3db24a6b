import os

from .utils._enum import _DEFAULT_BACKEND


class densityConfig:
    r"""Process-wide defaults for the density engine.

    Engine arguments left at ``None`` fall back to these values, so a
    notebook can change the behaviour of every call in one place::

        >>> import scdensity as scd
        >>> scd.settings.n_jobs = 4
        >>> scd.settings.normalization = 'sum'
    """

    def __init__(self):
        self.n_jobs = 1
        self.backend = _DEFAULT_BACKEND
        # target cells evaluated per block, bounds memory at block_size x n_cells
        self.block_size = 1024
        self.bw_floor = 1e-3
        self.kernel = 'gaussian'
        self.normalization = 'max'
        self.verbosity = 1

    def set_n_jobs(self, n_jobs=-1):
        r"""Use ``n_jobs`` workers for per-feature evaluation (-1 means all cores)."""
        if n_jobs == -1:
            n_jobs = os.cpu_count() or 1
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be -1 or a positive integer, got {n_jobs}")
        self.n_jobs = int(n_jobs)
        return self.n_jobs

    def reset(self):
        r"""Restore all defaults."""
        self.__init__()

    def __repr__(self):
        items = ', '.join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"densityConfig({items})"


def check_reference_key(adata):
    if 'REFERENCE_MANU' not in adata.uns.keys():
        adata.uns['REFERENCE_MANU'] = {}


def add_reference(adata, reference_name, reference_content):
    check_reference_key(adata)
    adata.uns['REFERENCE_MANU'][reference_name] = reference_content


reference_dict = {
    'Nebulosa': 'Alquicira-Hernandez, J., & Powell, J. E. (2021). Nebulosa recovers single-cell gene expression signals by kernel density estimation. Bioinformatics, 37(16), 2485-2487.',
    'Silverman': 'Silverman, B. W. (1986). Density Estimation for Statistics and Data Analysis. London: Chapman & Hall.',
    'Scott': 'Scott, D. W. (1992). Multivariate Density Estimation: Theory, Practice, and Visualization. New York: Wiley.',
}


def generate_reference_table(adata):
    """
    Generate a table of references for the methods recorded on ``adata``.
    """
    import pandas as pd
    if 'REFERENCE_MANU' not in adata.uns.keys():
        return None
    rows = []
    for ref, content in adata.uns['REFERENCE_MANU'].items():
        rows.append({'method': ref,
                     'content': content,
                     'reference': reference_dict.get(ref, '')})
    return pd.DataFrame(rows, columns=['method', 'content', 'reference'])


class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


EMOJI = {
    "start":        "🔍",  # start
    "cpu":          "🖥️",  # CPU mode
    "done":         "✅",  # done
    "error":        "❌",  # error
    "bar":          "📊",  # summary
    "warning":      "⚠️",  # warning
}


settings = densityConfig()
