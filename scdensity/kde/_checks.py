import numpy as np
from scipy import sparse

from ._errors import InvalidInput, DimensionMismatch


def _to_dense(a) -> np.ndarray:
    return a.toarray() if sparse.issparse(a) else np.asarray(a)


def check_embedding(embedding, min_cells: int = 1) -> np.ndarray:
    r"""Return the embedding as a finite ``(n_cells, n_dims)`` float array.

    A 1-D input is read as ``n_cells`` points in one dimension.
    """
    emb = _to_dense(embedding)
    try:
        emb = emb.astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Embedding must be numeric: {e}") from e
    if emb.ndim == 1:
        emb = emb[:, None]
    if emb.ndim != 2:
        raise InvalidInput(f"Embedding must be 2-D (cells x dims), got {emb.ndim}-D")
    n_cells, n_dims = emb.shape
    if n_dims < 1:
        raise InvalidInput("Embedding needs at least one dimension")
    if n_cells < min_cells:
        raise InvalidInput(f"Embedding needs at least {min_cells} cells, got {n_cells}")
    if not np.all(np.isfinite(emb)):
        bad = int(np.sum(~np.all(np.isfinite(emb), axis=1)))
        raise InvalidInput(f"Embedding has {bad} cells with NaN/Inf coordinates")
    return emb


def check_weights(weights, n_cells: int, feature: str = "") -> np.ndarray:
    r"""Return ``weights`` as a non-negative, finite float vector of length ``n_cells``."""
    label = f" for '{feature}'" if feature else ""
    try:
        w = np.ravel(_to_dense(weights)).astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Expression vector{label} must be numeric: {e}") from e
    if w.shape[0] != n_cells:
        raise DimensionMismatch(
            f"Expression vector{label} has length {w.shape[0]}, embedding has {n_cells} cells"
        )
    if not np.all(np.isfinite(w)):
        raise InvalidInput(f"Expression vector{label} contains NaN/Inf")
    if np.any(w < 0):
        raise InvalidInput(f"Expression vector{label} contains negative values")
    return w
