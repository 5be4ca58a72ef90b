"""Tests for configuration models."""

from pathlib import Path

import jax
import numpy as np
import pytest
from pydantic import ValidationError

from smckernels.config import HESSIAN_FILENAME, MODE_FILENAME, SMCConfig


class TestSMCConfig:
    """Tests for SMCConfig."""

    def test_default_values(self):
        """Default config should have expected values."""
        config = SMCConfig()

        assert config.n_particles == 1000
        assert config.seed == 42
        assert config.initial_draw_source == "prior"
        assert config.mode_key == "params"
        assert config.hessian_key == "hessian"
        assert config.eigenvalue_threshold == 1e-6
        assert config.initial_scale == 0.5
        assert config.verbosity == "low"

    def test_custom_values(self):
        """Custom values should be accepted."""
        config = SMCConfig(n_particles=500, seed=123, max_init_attempts=50)

        assert config.n_particles == 500
        assert config.seed == 123
        assert config.max_init_attempts == 50

    def test_immutable(self):
        """Config should be frozen."""
        config = SMCConfig()

        with pytest.raises(ValidationError):
            config.n_particles = 500

    def test_n_particles_validation(self):
        """n_particles must be positive."""
        with pytest.raises(ValidationError):
            SMCConfig(n_particles=0)

    def test_initial_scale_validation(self):
        """initial_scale must be positive."""
        with pytest.raises(ValidationError):
            SMCConfig(initial_scale=0.0)

    def test_prng_key_from_seed(self):
        """The root key is derived from the seed."""
        key = SMCConfig(seed=7).prng_key()

        np.testing.assert_array_equal(key, jax.random.PRNGKey(7))
        assert not np.array_equal(key, SMCConfig(seed=8).prng_key())

    def test_unknown_draw_source_rejected(self):
        """Only prior and normal sources exist."""
        with pytest.raises(ValidationError):
            SMCConfig(initial_draw_source="uniform")

    def test_normal_source_requires_paths(self):
        """The Laplace source needs both artifact paths."""
        with pytest.raises(ValidationError):
            SMCConfig(initial_draw_source="normal")

        with pytest.raises(ValidationError):
            SMCConfig(initial_draw_source="normal", mode_path="mode.npz")

    def test_with_artifact_dir(self, tmp_path):
        """Artifact paths should be built from the directory."""
        config = SMCConfig.with_artifact_dir(tmp_path, n_particles=20)

        assert config.initial_draw_source == "normal"
        assert config.mode_path == tmp_path / MODE_FILENAME
        assert config.hessian_path == tmp_path / HESSIAN_FILENAME
        assert config.n_particles == 20

    def test_paths_coerced(self):
        """String paths should become Path objects."""
        config = SMCConfig(
            initial_draw_source="normal",
            mode_path="a/mode.npz",
            hessian_path="a/hessian.npz",
        )

        assert isinstance(config.mode_path, Path)
        assert isinstance(config.hessian_path, Path)
