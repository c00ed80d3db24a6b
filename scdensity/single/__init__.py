r"""
Single-cell entry points working on AnnData objects.

calculate_density: weighted KDE of genes or obs columns over an embedding,
    written to ``adata.obs``.

Examples:
    >>> import scdensity as scd
    >>> scd.single.calculate_density(adata, ['CD8A', 'CCR7'], basis='umap', joint=True)
"""

from ._density import calculate_density
