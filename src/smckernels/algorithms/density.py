"""Tempered measurement densities for SMC reweighting.

Between stages ``phi_old`` and ``phi_new`` each period contributes the
ratio of Gaussian measurement densities with covariances ``EE / phi_new``
and ``EE / phi_old``. At the first stage there is no ``phi_old``, so the
normalized density with covariance ``EE / phi_new`` is used instead.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Float, jaxtyped

__all__ = [
    "log_tempered_density",
    "tempered_density",
    "incremental_log_weight",
]


@jaxtyped(typechecker=beartype)
def log_tempered_density(
    phi_new: float | Float[Array, ""],
    phi_old: float | Float[Array, ""],
    yt: Float[Array, " n_obs"],
    perror: Float[Array, " n_obs"],
    EE: Float[Array, "n_obs n_obs"],
    initialize: bool = False,
) -> Float[Array, ""]:
    """Log of ``tempered_density``."""
    n_obs = yt.shape[0]
    quad = perror @ jnp.linalg.solve(EE, perror)

    if initialize:
        _, logdet = jnp.linalg.slogdet(EE)
        return (
            n_obs / 2 * jnp.log(phi_new / (2 * jnp.pi))
            - 0.5 * logdet
            - 0.5 * phi_new * quad
        )

    return n_obs / 2 * jnp.log(phi_new / phi_old) - 0.5 * (phi_new - phi_old) * quad


@jaxtyped(typechecker=beartype)
def tempered_density(
    phi_new: float | Float[Array, ""],
    phi_old: float | Float[Array, ""],
    yt: Float[Array, " n_obs"],
    perror: Float[Array, " n_obs"],
    EE: Float[Array, "n_obs n_obs"],
    initialize: bool = False,
) -> Float[Array, ""]:
    """Per-period tempered measurement density at ``perror``.

    Parameters
    ----------
    phi_new : float
        Tempering exponent of the new stage.
    phi_old : float
        Tempering exponent of the previous stage. Ignored when
        ``initialize`` is set.
    yt : Array
        Observations for the period; only their count is used.
    perror : Array
        Measurement error for the period.
    EE : Array
        Measurement error covariance, positive definite.
    initialize : bool
        Evaluate the first-stage normalized density instead of the
        stage-to-stage ratio.

    Returns
    -------
    density : Array
        ``(phi_new/phi_old)^(n/2) exp(-(phi_new-phi_old)/2 e' EE^-1 e)``,
        or ``(phi_new/2pi)^(n/2) |EE|^(-1/2) exp(-phi_new/2 e' EE^-1 e)``
        when initializing.
    """
    return jnp.exp(log_tempered_density(phi_new, phi_old, yt, perror, EE, initialize))


@jaxtyped(typechecker=beartype)
def incremental_log_weight(
    phi_new: float | Float[Array, ""],
    phi_old: float | Float[Array, ""],
    ys: Float[Array, "n_periods n_obs"],
    perrors: Float[Array, "n_periods n_obs"],
    EE: Float[Array, "n_obs n_obs"],
    initialize: bool = False,
) -> Float[Array, ""]:
    """Full-sample log incremental weight, summed over periods.

    Parameters
    ----------
    phi_new, phi_old : float
        Tempering exponents of the new and previous stage.
    ys : Array
        Observations, one period per row.
    perrors : Array
        Measurement errors, one period per row.
    EE : Array
        Measurement error covariance.
    initialize : bool
        Use the first-stage normalized density.

    Returns
    -------
    log_weight : Array
        Sum of ``log_tempered_density`` over periods.
    """
    per_period = jax.vmap(
        lambda y, e: log_tempered_density(phi_new, phi_old, y, e, EE, initialize)
    )(ys, perrors)
    return jnp.sum(per_period)
