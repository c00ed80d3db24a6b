import pytest
import numpy as np
import anndata as ad

import scdensity as scd
from scdensity.kde import DensityResults, InvalidInput, estimate_density


class TestCalculateDensity:
    """AnnData entry point: reading features, writing obs columns and params."""

    def test_writes_obs_columns(self, pbmc_like_adata):
        adata = pbmc_like_adata
        res = scd.single.calculate_density(adata, ['GENE_A', 'GENE_B'], basis='umap',
                                           joint=True, verbose=False)
        assert isinstance(res, DensityResults)
        for col in ('density_GENE_A', 'density_GENE_B', 'density_joint'):
            assert col in adata.obs.columns
            assert adata.obs[col].notna().all()
        np.testing.assert_allclose(adata.obs['density_GENE_A'].to_numpy(), res['GENE_A'].values)

    def test_matches_engine_on_arrays(self, pbmc_like_adata, sparse_expression, random_embedding):
        scd.single.calculate_density(pbmc_like_adata, ['GENE_A', 'GENE_C'], joint=True, verbose=False)
        expected = estimate_density(random_embedding, sparse_expression[['GENE_A', 'GENE_C']], joint=True)
        np.testing.assert_allclose(pbmc_like_adata.obs['density_joint'].to_numpy(), expected.joint.values)

    def test_params_in_uns(self, pbmc_like_adata):
        scd.single.calculate_density(pbmc_like_adata, 'GENE_C', key_added='kde',
                                     kernel='triangular', normalization='sum', verbose=False)
        params = pbmc_like_adata.uns['kde_params']
        assert params['basis'] == 'X_umap'
        assert params['dims'] == [0, 1]
        assert params['features'] == ['GENE_C']
        assert params['kernel'] == 'triangular'
        assert params['normalization'] == 'sum'
        assert params['method'] == 'exact'
        assert params['bw_rule'] == 'silverman'
        assert len(params['bandwidth']) == 2
        assert pbmc_like_adata.obs['kde_GENE_C'].sum() == pytest.approx(1.0)

    def test_obs_column_as_feature(self, pbmc_like_adata):
        scd.single.calculate_density(pbmc_like_adata, ['score', 'GENE_A'], joint=True, verbose=False)
        assert 'density_score' in pbmc_like_adata.obs.columns

    def test_layer(self, pbmc_like_adata):
        counts = scd.single.calculate_density(pbmc_like_adata, 'GENE_A', verbose=False)
        logged = scd.single.calculate_density(pbmc_like_adata, 'GENE_A', layer='log1p',
                                              key_added='log_density', verbose=False)
        assert pbmc_like_adata.uns['log_density_params']['layer'] == 'log1p'
        assert not np.allclose(counts['GENE_A'].values, logged['GENE_A'].values)

    def test_dims_select_embedding_columns(self, pbmc_like_adata):
        scd.single.calculate_density(pbmc_like_adata, 'GENE_A', basis='X_pca', dims=(0, 2),
                                     verbose=False)
        assert pbmc_like_adata.uns['density_params']['dims'] == [0, 2]
        scd.single.calculate_density(pbmc_like_adata, 'GENE_A', basis='pca', dims=None,
                                     key_added='all_dims', verbose=False)
        assert len(pbmc_like_adata.uns['all_dims_params']['bandwidth']) == 3

    @pytest.mark.parametrize("dims", [(0, 5), (0, -5), (-1,), ()])
    def test_invalid_dims(self, pbmc_like_adata, dims):
        with pytest.raises(InvalidInput):
            scd.single.calculate_density(pbmc_like_adata, 'GENE_A', dims=dims, verbose=False)
        assert 'density_GENE_A' not in pbmc_like_adata.obs.columns

    def test_non_finite_cells_get_nan(self, pbmc_like_adata):
        adata = pbmc_like_adata
        adata.obsm['X_umap'][4, 0] = np.nan
        res = scd.single.calculate_density(adata, ['GENE_A', 'GENE_B'], joint=True, verbose=False)
        assert np.isnan(adata.obs['density_GENE_A'].iloc[4])
        assert np.isnan(adata.obs['density_joint'].iloc[4])
        assert adata.obs['density_GENE_A'].notna().sum() == adata.n_obs - 1
        assert len(res['GENE_A']) == adata.n_obs - 1

    def test_copy(self, pbmc_like_adata):
        out = scd.single.calculate_density(pbmc_like_adata, 'GENE_A', copy=True, verbose=False)
        assert isinstance(out, ad.AnnData)
        assert 'density_GENE_A' in out.obs.columns
        assert 'density_GENE_A' not in pbmc_like_adata.obs.columns

    def test_reference_recorded(self, pbmc_like_adata):
        scd.single.calculate_density(pbmc_like_adata, 'GENE_A', verbose=False)
        table = scd.generate_reference_table(pbmc_like_adata)
        assert 'Nebulosa' in table['method'].tolist()
        assert table.loc[table['method'] == 'Nebulosa', 'reference'].iloc[0].startswith('Alquicira')

    def test_verbose_summary(self, pbmc_like_adata, capsys):
        scd.single.calculate_density(pbmc_like_adata, ['GENE_A', 'GENE_B'], joint=True)
        out = capsys.readouterr().out
        assert 'Weighted KDE' in out
        assert 'density_joint' in out


class TestCalculateDensityErrors:

    def test_missing_embedding(self, pbmc_like_adata):
        with pytest.raises(KeyError):
            scd.single.calculate_density(pbmc_like_adata, 'GENE_A', basis='tsne', verbose=False)

    def test_missing_feature(self, pbmc_like_adata):
        with pytest.raises(KeyError):
            scd.single.calculate_density(pbmc_like_adata, ['GENE_A', 'NOT_A_GENE'], verbose=False)

    def test_categorical_feature(self, pbmc_like_adata):
        with pytest.raises(InvalidInput):
            scd.single.calculate_density(pbmc_like_adata, 'cell_type', verbose=False)

    def test_no_features(self, pbmc_like_adata):
        with pytest.raises(InvalidInput):
            scd.single.calculate_density(pbmc_like_adata, [], verbose=False)

    def test_joint_with_one_feature(self, pbmc_like_adata):
        with pytest.raises(InvalidInput):
            scd.single.calculate_density(pbmc_like_adata, 'GENE_A', joint=True, verbose=False)
        assert 'density_GENE_A' not in pbmc_like_adata.obs.columns
