"""Proposal generator for the SMC mutation step.

The proposal combines three Gaussian draws around the current particle:
one with the full covariance, one with only its diagonal, and one with
the full covariance around an alternative mean. The result is the
weighted SUM of the three independent draws with weights
``alpha, (1 - alpha)/2, (1 - alpha)/2``. It is not a categorical mixture
that picks one component per draw.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Float, PRNGKeyArray, jaxtyped

from smckernels.distributions.degenerate import (
    DegenerateMvNormal,
    degenerate_mvnormal_from_covariance,
)
from smckernels.errors import InvalidMixtureWeightError

__all__ = [
    "mixture_components",
    "mvnormal_mixture_draw",
]


@jaxtyped(typechecker=beartype)
def mixture_components(
    p: Float[Array, " n_params"],
    sigma: Float[Array, "n_params n_params"],
    p_prop: Float[Array, " n_params"] | None = None,
) -> tuple[DegenerateMvNormal, DegenerateMvNormal, DegenerateMvNormal]:
    """Build the full, diagonal and alternative-mean components.

    Parameters
    ----------
    p : Array
        Current parameter vector.
    sigma : Array
        Proposal covariance.
    p_prop : Array, optional
        Mean of the third component. When omitted the third component is
        the diagonal one. A zero vector is a valid mean.

    Returns
    -------
    d, d_diag, d_prop : DegenerateMvNormal
        The three components.
    """
    d = degenerate_mvnormal_from_covariance(p, sigma)
    d_diag = degenerate_mvnormal_from_covariance(p, jnp.diag(jnp.diag(sigma)))
    if p_prop is None:
        d_prop = d_diag
    else:
        d_prop = degenerate_mvnormal_from_covariance(p_prop, sigma)
    return d, d_diag, d_prop


@jaxtyped(typechecker=beartype)
def mvnormal_mixture_draw(
    key: PRNGKeyArray,
    p: Float[Array, " n_params"],
    sigma: Float[Array, "n_params n_params"],
    cc: float | Float[Array, ""] = 1.0,
    alpha: float | Float[Array, ""] = 1.0,
    p_prop: Float[Array, " n_params"] | None = None,
) -> Float[Array, " n_params"]:
    """Draw a Metropolis-Hastings candidate around ``p``.

    Computes::

        alpha       * (mu_d    + cc * sigma_d    @ z1)
      + (1-alpha)/2 * (mu_diag + cc * sigma_diag @ z2)
      + (1-alpha)/2 * (mu_prop + cc * sigma_prop @ z3)

    with ``z1, z2, z3`` independent standard normals drawn from the three
    subkeys of ``jax.random.split(key, 3)`` in that order.

    Parameters
    ----------
    key : PRNGKeyArray
        Random key.
    p : Array
        Current parameter vector.
    sigma : Array
        Proposal covariance.
    cc : float
        Scale applied to every component's square-root factor.
    alpha : float
        Weight of the full-covariance component, in [0, 1]. A JAX scalar
        is accepted but must be concrete, since the range is checked
        eagerly.
    p_prop : Array, optional
        Mean of the third component.

    Returns
    -------
    proposal : Array
        Candidate parameter vector.

    Raises
    ------
    InvalidMixtureWeightError
        If ``alpha`` is outside [0, 1].
    """
    if not 0.0 <= alpha <= 1.0:
        raise InvalidMixtureWeightError(alpha)

    n_params = p.shape[0]
    d, d_diag, d_prop = mixture_components(p, sigma, p_prop)
    key_d, key_diag, key_prop = jax.random.split(key, 3)

    z1 = jax.random.normal(key_d, shape=(n_params,))
    z2 = jax.random.normal(key_diag, shape=(n_params,))
    z3 = jax.random.normal(key_prop, shape=(n_params,))

    normal_component = alpha * (d.mu + cc * d.sigma @ z1)
    diag_component = (1.0 - alpha) / 2.0 * (d_diag.mu + cc * d_diag.sigma @ z2)
    proposal_component = (1.0 - alpha) / 2.0 * (d_prop.mu + cc * d_prop.sigma @ z3)

    return normal_component + diag_component + proposal_component
