"""Multivariate normal with a possibly singular covariance.

A ``DegenerateMvNormal`` is parameterized by its mean and a square-root
factor ``sigma`` of its covariance, so draws are ``mu + sigma @ z``. The
factor may be rank deficient, in which case draws are confined to the
affine subspace ``mu + range(sigma)``.
"""

from __future__ import annotations

import chex
import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Float, PRNGKeyArray, jaxtyped

__all__ = [
    "DegenerateMvNormal",
    "pseudo_inverse_sqrt",
    "psd_sqrt",
    "degenerate_mvnormal_from_hessian",
    "degenerate_mvnormal_from_covariance",
]

# Relative tolerance for the numerical rank of a square-root factor.
_RANK_RTOL = 1e-10


@chex.dataclass(frozen=True)
class DegenerateMvNormal:
    """Gaussian distribution defined by a mean and a covariance factor.

    Attributes
    ----------
    mu : Array
        Mean vector with shape [dim].
    sigma : Array
        Square root of the covariance with shape [dim, dim], such that
        ``sigma @ sigma.T`` is the covariance.
    """

    mu: Float[Array, " dim"]
    sigma: Float[Array, "dim dim"]

    @property
    def dim(self) -> int:
        """Dimension of the distribution."""
        return self.mu.shape[0]

    @property
    def covariance(self) -> Float[Array, "dim dim"]:
        """Covariance matrix ``sigma @ sigma.T``."""
        return self.sigma @ self.sigma.T

    @property
    def rank(self) -> int:
        """Numerical rank of the covariance factor."""
        singular_values = jnp.linalg.svd(self.sigma, compute_uv=False)
        cutoff = _RANK_RTOL * jnp.maximum(jnp.max(singular_values), 1.0)
        return int(jnp.sum(singular_values > cutoff))

    def sample(
        self, key: PRNGKeyArray, n_samples: int
    ) -> Float[Array, "n_samples dim"]:
        """Draw ``n_samples`` independent samples, one per row."""
        z = jax.random.normal(key, shape=(n_samples, self.dim))
        return self.mu + z @ self.sigma.T

    def log_prob(self, x: Float[Array, " dim"]) -> Float[Array, ""]:
        """Log-density with respect to Lebesgue measure on the support.

        Uses the pseudo-inverse and pseudo-determinant of the covariance.
        Points off the support ``mu + range(sigma)`` get ``-inf``.
        """
        u, s, _ = jnp.linalg.svd(self.sigma)
        cutoff = _RANK_RTOL * jnp.maximum(jnp.max(s), 1.0)
        keep = s > cutoff
        rank = jnp.sum(keep)

        diff = x - self.mu
        # Coordinates of diff in the left singular basis.
        coords = u.T @ diff
        safe_s = jnp.where(keep, s, 1.0)
        mahal = jnp.sum(jnp.where(keep, (coords / safe_s) ** 2, 0.0))
        log_pdet = 2.0 * jnp.sum(jnp.where(keep, jnp.log(safe_s), 0.0))

        residual = jnp.linalg.norm(jnp.where(keep, 0.0, coords))
        on_support = residual <= 1e-8 * (1.0 + jnp.linalg.norm(diff))

        log_density = -0.5 * (rank * jnp.log(2.0 * jnp.pi) + log_pdet + mahal)
        return jnp.where(on_support, log_density, -jnp.inf)


@jaxtyped(typechecker=beartype)
def pseudo_inverse_sqrt(
    hessian: Float[Array, "n n"],
    threshold: float = 1e-6,
) -> tuple[Float[Array, "n n"], int]:
    """Square root of the pseudo-inverse of a symmetric curvature matrix.

    Eigenvalues at or below ``threshold`` are treated as flat directions
    and receive zero spread.

    Parameters
    ----------
    hessian : Array
        Symmetric Hessian of the negative log-posterior.
    threshold : float
        Eigenvalue cutoff.

    Returns
    -------
    factor : Array
        ``U @ sqrt(S_inv)`` where ``S_inv`` holds ``1/s`` for the retained
        eigenvalues and zero elsewhere.
    rank : int
        Number of retained eigenvalues.
    """
    eigvals, eigvecs = jnp.linalg.eigh(hessian)
    keep = eigvals > threshold
    rank = int(jnp.sum(keep))

    # eigh returns ascending eigenvalues, so the retained ones are the last
    # ``rank`` diagonal positions of S_inv.
    safe = jnp.where(keep, eigvals, 1.0)
    s_inv = jnp.where(keep, 1.0 / safe, 0.0)
    factor = eigvecs * jnp.sqrt(s_inv)[None, :]
    return factor, rank


@jaxtyped(typechecker=beartype)
def psd_sqrt(cov: Float[Array, "n n"]) -> Float[Array, "n n"]:
    """Symmetric square root ``U sqrt(S) U^T`` of a PSD matrix.

    Small negative eigenvalues from round-off are clipped to zero.
    """
    eigvals, eigvecs = jnp.linalg.eigh(cov)
    root = jnp.sqrt(jnp.clip(eigvals, 0.0, None))
    return (eigvecs * root[None, :]) @ eigvecs.T


@jaxtyped(typechecker=beartype)
def degenerate_mvnormal_from_hessian(
    params: Float[Array, " n"],
    hessian: Float[Array, "n n"],
    threshold: float = 1e-6,
) -> DegenerateMvNormal:
    """Laplace approximation centered at a posterior mode.

    The covariance is the pseudo-inverse of ``hessian``. If no eigenvalue
    exceeds ``threshold`` the factor is the zero matrix and every draw
    equals ``params``.

    Parameters
    ----------
    params : Array
        Posterior mode.
    hessian : Array
        Hessian of the negative log-posterior at ``params``.
    threshold : float
        Eigenvalue cutoff passed to ``pseudo_inverse_sqrt``.

    Returns
    -------
    dist : DegenerateMvNormal
        Sampling distribution around the mode.
    """
    factor, _ = pseudo_inverse_sqrt(hessian, threshold)
    return DegenerateMvNormal(mu=params, sigma=factor)


@jaxtyped(typechecker=beartype)
def degenerate_mvnormal_from_covariance(
    mu: Float[Array, " n"],
    cov: Float[Array, "n n"],
) -> DegenerateMvNormal:
    """Gaussian with mean ``mu`` and covariance ``cov``."""
    return DegenerateMvNormal(mu=mu, sigma=psd_sqrt(cov))
