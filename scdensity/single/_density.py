import logging
from typing import Optional, Sequence, Union

import numpy as np
import scanpy as sc
from anndata import AnnData

from .._settings import settings, EMOJI, Colors, add_reference
from ..kde._checks import _to_dense
from ..kde._engine import WeightedKDEEngine
from ..kde._errors import InvalidInput
from ..kde._results import DensityResults

logger = logging.getLogger(__name__)


def _embedding_key(adata: AnnData, basis: str) -> str:
    if basis in adata.obsm:
        return basis
    if f"X_{basis}" in adata.obsm:
        return f"X_{basis}"
    raise KeyError(f"Embedding '{basis}' not found in adata.obsm.")


def calculate_density(
    adata: AnnData,
    features: Union[str, Sequence[str]],
    basis: str = "X_umap",
    dims: Optional[Sequence[int]] = (0, 1),
    layer: Optional[str] = None,
    joint: bool = False,
    key_added: str = "density",
    copy: bool = False,
    verbose: bool = True,
    **kwargs,
) -> Union[DensityResults, AnnData]:
    r"""
    Weighted KDE of gene expression over a cell embedding.

    For each feature the expression of every cell is used as the weight of
    a kernel density estimate on the embedding, evaluated at the cells
    themselves. Smoothing over neighbouring cells recovers signal lost to
    dropout. With ``joint=True`` the per-feature densities are multiplied
    into a co-expression density (e.g. CD8A and CCR7 for naive CD8 T cells).

    Cells with NaN/Inf coordinates or expression are left out of the
    estimate and receive NaN.

    Arguments:
        adata: AnnData with the embedding in ``adata.obsm[basis]``
        features: gene names (``adata.var_names``) and/or numeric
            ``adata.obs`` columns
        basis: key in ``adata.obsm``, with or without the ``X_`` prefix
        dims: embedding columns to use; ``None`` uses all of them
        layer: layer to read expression from instead of ``adata.X``
        joint: also compute the joint density of all features
        key_added: prefix of the ``adata.obs`` columns written
        copy: work on a copy of ``adata`` and return it
        verbose: print a short summary
        **kwargs: :class:`~scdensity.kde.WeightedKDEEngine` options
            (``kernel``, ``bw``, ``rule``, ``adjust``, ``normalization``,
            ``method``, ``n_jobs``, ...)

    Returns:
        :class:`~scdensity.kde.DensityResults` for the cells used, or the
        copied AnnData when ``copy=True``.

        Sets ``adata.obs[f'{key_added}_{feature}']`` for every feature,
        ``adata.obs[f'{key_added}_joint']`` when ``joint`` and
        ``adata.uns[f'{key_added}_params']``.

    Examples:
        >>> import scdensity as scd
        >>> scd.single.calculate_density(adata, ['CD8A', 'CCR7'], basis='umap', joint=True)
        >>> adata.obs[['density_CD8A', 'density_CCR7', 'density_joint']]
    """
    if isinstance(features, str):
        features = [features]
    features = list(features)
    if len(features) == 0:
        raise InvalidInput("No features requested")

    adata = adata.copy() if copy else adata
    key = _embedding_key(adata, basis)

    emb_all = np.asarray(_to_dense(adata.obsm[key]), dtype=float)
    if emb_all.ndim == 1:
        emb_all = emb_all[:, None]
    if dims is not None:
        dims = [int(d) for d in dims]
        if len(dims) == 0:
            raise InvalidInput("dims must select at least one embedding column")
        if min(dims) < 0 or max(dims) >= emb_all.shape[1]:
            raise InvalidInput(
                f"dims {dims} out of range for '{key}' with {emb_all.shape[1]} columns"
            )
        emb_all = emb_all[:, dims]

    expr = sc.get.obs_df(adata, keys=features, layer=layer)
    try:
        expr_values = expr.to_numpy(dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Features must be numeric: {e}") from e

    mask = np.all(np.isfinite(emb_all), axis=1) & np.all(np.isfinite(expr_values), axis=1)
    n_used = int(mask.sum())

    engine = WeightedKDEEngine(**kwargs)
    if verbose:
        print(f"{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Weighted KDE on '{key}':{Colors.ENDC}")
        print(f"   {Colors.CYAN}Cells used: {Colors.BOLD}{n_used:,}/{adata.n_obs:,}{Colors.ENDC}")
        print(f"   {Colors.CYAN}Features: {Colors.BOLD}{', '.join(features)}{Colors.ENDC}")
        print(f"   {Colors.BLUE}Kernel: {Colors.BOLD}{engine.kernel}{Colors.ENDC}"
              f"{Colors.BLUE}, normalization: {Colors.BOLD}{engine.normalization}{Colors.ENDC}"
              f"{Colors.BLUE}, method: {Colors.BOLD}{engine.method}{Colors.ENDC}")
        if n_used < adata.n_obs:
            print(f"   {Colors.WARNING}{EMOJI['warning']} {adata.n_obs - n_used:,} cells with NaN/Inf "
                  f"coordinates or expression get NaN{Colors.ENDC}")

    results = engine.run(emb_all[mask], expr.loc[mask], joint=joint,
                         progress=verbose and settings.verbosity > 1)

    for res in results:
        column = np.full(adata.n_obs, np.nan)
        column[mask] = res.values
        adata.obs[f"{key_added}_{res.feature}"] = column

    adata.uns[f"{key_added}_params"] = dict(
        basis=key,
        dims=dims if dims is not None else list(range(emb_all.shape[1])),
        features=features,
        layer=layer if layer is not None else "X",
        joint=joint,
        bandwidth=results.bandwidth.values.tolist(),
        bw_rule=results.bandwidth.rule,
        adjust=engine.adjust,
        kernel=str(engine.kernel),
        normalization=str(engine.normalization),
        method=str(engine.method),
    )
    add_reference(adata, 'Nebulosa', 'weighted kernel density estimation with scdensity')
    logger.debug("Wrote %s to adata.obs", [f"{key_added}_{f}" for f in results.features])

    if verbose:
        print(f"   {Colors.GREEN}{EMOJI['done']} Added columns: "
              f"{Colors.BOLD}{', '.join(f'{key_added}_{f}' for f in results.features)}{Colors.ENDC}")
        print(f"   {Colors.BLUE}{EMOJI['bar']} Bandwidth ({results.bandwidth.rule}): "
              f"{Colors.BOLD}{np.round(results.bandwidth.values, 4).tolist()}{Colors.ENDC}")

    return adata if copy else results
