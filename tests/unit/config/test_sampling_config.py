"""Tests for SamplingConfig."""

import pytest

from partsampler.config import SHUFFLE_SEED_OFFSET, SamplingConfig
from partsampler.core.exceptions import InvalidInputError
from partsampler.execution import PartitionExecutor


class TestSamplingConfig:
    """Tests for defaults and validation."""

    def test_defaults(self):
        config = SamplingConfig()
        assert config.max_stratified_retries == 10
        assert config.max_uniform_retries is None
        assert config.shuffle_seed_offset == SHUFFLE_SEED_OFFSET == 0x580FF13
        assert config.replication == "fractional"
        assert config.n_jobs == 1

    @pytest.mark.parametrize("kwargs", [
        {"max_stratified_retries": -1},
        {"max_uniform_retries": -1},
        {"replication": "binomial"},
        {"n_jobs": 0},
        {"n_jobs": -3},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidInputError):
            SamplingConfig(**kwargs)

    def test_executor(self):
        executor = SamplingConfig(n_jobs=4).executor()
        assert isinstance(executor, PartitionExecutor)
        assert executor.n_jobs == 4
