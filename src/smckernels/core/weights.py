"""Log-weight utilities for particle clouds."""

from __future__ import annotations

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Float, jaxtyped

__all__ = [
    "normalize_log_weights",
    "compute_ess",
]


@jaxtyped(typechecker=beartype)
def normalize_log_weights(
    log_weights: Float[Array, " n_particles"],
) -> Float[Array, " n_particles"]:
    """Normalize log-weights so that ``exp`` of them sums to one."""
    return log_weights - jax.scipy.special.logsumexp(log_weights)


@jaxtyped(typechecker=beartype)
def compute_ess(log_weights: Float[Array, " n_particles"]) -> Float[Array, ""]:
    """Effective sample size ``1 / sum(w_i^2)`` of normalized weights.

    Parameters
    ----------
    log_weights : Array
        Log-weights (not necessarily normalized).

    Returns
    -------
    ess : Array
        Effective sample size in ``(0, n_particles]``.
    """
    log_normalized = normalize_log_weights(log_weights)
    return jnp.exp(-jax.scipy.special.logsumexp(2.0 * log_normalized))

