"""
Shared pytest configuration and fixtures for the scdensity test suite.
"""

import pytest
import numpy as np
import pandas as pd
import anndata as ad

import scdensity as scd


@pytest.fixture
def random_seed():
    """
    Provides a consistent random seed for reproducible tests.
    """
    return 42


@pytest.fixture(autouse=True)
def reset_random_state(random_seed):
    """
    Automatically reset random state before each test for reproducibility.
    """
    np.random.seed(random_seed)


@pytest.fixture(autouse=True)
def reset_settings():
    """
    Restore the global settings after every test.
    """
    yield
    scd.settings.reset()


@pytest.fixture
def unit_square():
    """Four cells on the corners of the unit square."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])


@pytest.fixture
def random_embedding(random_seed):
    """Two Gaussian blobs in 2-D, 60 cells each."""
    rng = np.random.default_rng(random_seed)
    return np.vstack([
        rng.normal(loc=(-3, 0), scale=1.0, size=(60, 2)),
        rng.normal(loc=(3, 0), scale=1.0, size=(60, 2)),
    ])


@pytest.fixture
def sparse_expression(random_embedding, random_seed):
    """
    Three zero-inflated features aligned with ``random_embedding``.

    GENE_A is expressed in the left blob, GENE_B in the right blob and
    GENE_C everywhere at a low level.
    """
    rng = np.random.default_rng(random_seed + 1)
    n = random_embedding.shape[0]
    left = random_embedding[:, 0] < 0
    a = rng.poisson(3, n) * left * (rng.random(n) > 0.5)
    b = rng.poisson(3, n) * ~left * (rng.random(n) > 0.5)
    c = rng.poisson(1, n)
    return pd.DataFrame({'GENE_A': a, 'GENE_B': b, 'GENE_C': c}, dtype=float)


@pytest.fixture
def pbmc_like_adata(random_embedding, sparse_expression, random_seed):
    """
    Small AnnData with counts in ``X``, a log layer, a UMAP-like embedding
    and a numeric obs score.
    """
    rng = np.random.default_rng(random_seed + 2)
    n = random_embedding.shape[0]
    background = rng.poisson(0.5, size=(n, 3)).astype(float)
    X = np.hstack([sparse_expression.to_numpy(), background])
    var_names = list(sparse_expression.columns) + ['GENE_D', 'GENE_E', 'GENE_F']
    obs = pd.DataFrame(
        {
            'score': rng.random(n),
            'cell_type': pd.Categorical(np.where(random_embedding[:, 0] < 0, 'T', 'B')),
        },
        index=[f'cell_{i}' for i in range(n)],
    )
    adata = ad.AnnData(X=X, obs=obs, var=pd.DataFrame(index=var_names))
    adata.layers['log1p'] = np.log1p(X)
    adata.obsm['X_umap'] = random_embedding.copy()
    adata.obsm['X_pca'] = np.hstack([random_embedding, rng.normal(size=(n, 1))])
    return adata
