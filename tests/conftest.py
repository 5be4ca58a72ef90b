"""Shared pytest configuration."""

import jax

# Covariance identities are checked to tight tolerances.
jax.config.update("jax_enable_x64", True)
