import logging

import pytest
import numpy as np

import scdensity as scd
from scdensity.utils import (
    Normalization,
    BandwidthRule,
    DensityMethod,
    Backend,
    setup_logging,
    enable_debug_logging,
    disable_debug_logging,
)


class TestSettings:

    def test_defaults(self):
        s = scd.settings
        assert s.n_jobs == 1
        assert s.backend == 'threading'
        assert s.kernel == 'gaussian'
        assert s.normalization == 'max'
        assert s.bw_floor > 0
        assert s.block_size > 0

    def test_set_n_jobs(self):
        assert scd.settings.set_n_jobs(2) == 2
        assert scd.settings.set_n_jobs(-1) >= 1
        with pytest.raises(ValueError):
            scd.settings.set_n_jobs(0)

    def test_reset(self):
        scd.settings.kernel = 'uniform'
        scd.settings.reset()
        assert scd.settings.kernel == 'gaussian'

    def test_kernel_default_reaches_engine(self, random_embedding, sparse_expression):
        scd.settings.kernel = 'uniform'
        engine = scd.WeightedKDEEngine()
        assert engine.kernel == 'uniform'

    def test_block_size_default_reaches_engine(self, random_embedding, sparse_expression):
        reference = scd.estimate_density(random_embedding, sparse_expression)
        scd.settings.block_size = 5
        blocked = scd.estimate_density(random_embedding, sparse_expression)
        for a, b in zip(reference, blocked):
            np.testing.assert_allclose(a.values, b.values)

    def test_repr(self):
        assert 'normalization' in repr(scd.settings)

    def test_default_backend_reaches_engine(self):
        from scdensity.utils._enum import _DEFAULT_BACKEND
        assert scd.settings.backend == _DEFAULT_BACKEND
        assert scd.WeightedKDEEngine().backend is Backend(_DEFAULT_BACKEND)


class TestEnums:

    def test_string_values(self):
        assert Normalization('sum') is Normalization.SUM
        assert BandwidthRule('scott') == 'scott'
        assert str(DensityMethod.GRID) == 'grid'
        assert repr(Backend.LOKY) == "'loky'"
        assert Backend.THREADING.v == 'threading'

    def test_invalid_value_message(self):
        with pytest.raises(ValueError) as excinfo:
            BandwidthRule('isj')
        assert "Invalid option `'isj'` for `BandwidthRule`" in str(excinfo.value)


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger('scdensity')
        level, handlers = logger.level, list(logger.handlers)
        yield
        logger.setLevel(level)
        logger.handlers = handlers

    def test_setup_logging_level(self):
        setup_logging('WARNING')
        assert logging.getLogger('scdensity').level == logging.WARNING

    def test_debug_from_environment(self, monkeypatch):
        monkeypatch.setenv('SCDENSITY_DEBUG', '1')
        setup_logging()
        assert logging.getLogger('scdensity').level == logging.DEBUG

    def test_enable_disable(self):
        enable_debug_logging()
        assert logging.getLogger('scdensity').level == logging.DEBUG
        disable_debug_logging()
        assert logging.getLogger('scdensity').level == logging.INFO

    def test_engine_logs_run(self, random_embedding, sparse_expression, caplog):
        with caplog.at_level(logging.DEBUG, logger='scdensity'):
            scd.estimate_density(random_embedding, sparse_expression)
        assert 'Evaluating 3 feature(s)' in caplog.text
