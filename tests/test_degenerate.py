"""Tests for the degenerate multivariate normal."""

import jax
import jax.numpy as jnp
import numpy as np
from jax.scipy.stats import multivariate_normal

from smckernels.distributions.degenerate import (
    DegenerateMvNormal,
    degenerate_mvnormal_from_covariance,
    degenerate_mvnormal_from_hessian,
    pseudo_inverse_sqrt,
    psd_sqrt,
)


def _spd_matrix(key, dim):
    a = jax.random.normal(key, shape=(dim, dim))
    return a @ a.T + dim * jnp.eye(dim)


class TestFromHessian:
    """Tests for the Laplace construction from a mode and Hessian."""

    def test_rank_zero_gives_zero_factor(self):
        """No eigenvalue above the threshold should give a zero factor."""
        params = jnp.array([1.0, -2.0, 3.0])
        hessian = jnp.zeros((3, 3))

        dist = degenerate_mvnormal_from_hessian(params, hessian)

        np.testing.assert_array_equal(dist.sigma, jnp.zeros((3, 3)))
        assert dist.rank == 0

    def test_rank_zero_samples_equal_mean(self):
        """Every draw should collapse onto the mode."""
        key = jax.random.PRNGKey(42)
        params = jnp.array([1.0, -2.0, 3.0])
        hessian = -jnp.eye(3)

        dist = degenerate_mvnormal_from_hessian(params, hessian)
        samples = dist.sample(key, 50)

        np.testing.assert_array_equal(samples, jnp.tile(params, (50, 1)))

    def test_full_rank_recovers_inverse(self):
        """factor @ factor.T should equal the inverse Hessian."""
        key = jax.random.PRNGKey(0)
        hessian = _spd_matrix(key, 4)

        dist = degenerate_mvnormal_from_hessian(jnp.zeros(4), hessian)

        np.testing.assert_allclose(
            dist.sigma @ dist.sigma.T, jnp.linalg.inv(hessian), atol=1e-10
        )
        assert dist.rank == 4

    def test_partial_rank_drops_flat_directions(self):
        """Flat directions should get zero variance."""
        hessian = jnp.diag(jnp.array([0.0, 2.0, 5.0]))

        factor, rank = pseudo_inverse_sqrt(hessian)

        assert rank == 2
        np.testing.assert_allclose(
            factor @ factor.T, jnp.diag(jnp.array([0.0, 0.5, 0.2])), atol=1e-12
        )

    def test_threshold_is_strict(self):
        """An eigenvalue equal to the threshold counts as zero curvature."""
        hessian = jnp.diag(jnp.array([1e-6, 4.0]))

        _, rank = pseudo_inverse_sqrt(hessian, threshold=1e-6)

        assert rank == 1

    def test_custom_threshold(self):
        """A larger threshold should discard more directions."""
        hessian = jnp.diag(jnp.array([0.5, 4.0]))

        _, rank_default = pseudo_inverse_sqrt(hessian)
        _, rank_strict = pseudo_inverse_sqrt(hessian, threshold=1.0)

        assert rank_default == 2
        assert rank_strict == 1

    def test_mean_is_mode(self):
        """The distribution should be centered at the mode."""
        params = jnp.array([0.3, 0.7])

        dist = degenerate_mvnormal_from_hessian(params, jnp.eye(2))

        np.testing.assert_array_equal(dist.mu, params)


class TestDegenerateMvNormal:
    """Tests for sampling and density evaluation."""

    def test_sample_shape(self):
        """Samples should have one row per draw."""
        key = jax.random.PRNGKey(42)
        dist = DegenerateMvNormal(mu=jnp.zeros(3), sigma=jnp.eye(3))

        samples = dist.sample(key, 10)

        assert samples.shape == (10, 3)

    def test_sample_moments(self):
        """Sample mean and covariance should match mu and sigma sigma^T."""
        key = jax.random.PRNGKey(1)
        cov = jnp.array([[2.0, 0.6], [0.6, 1.0]])
        dist = degenerate_mvnormal_from_covariance(jnp.array([1.0, -1.0]), cov)

        samples = dist.sample(key, 20000)

        np.testing.assert_allclose(jnp.mean(samples, axis=0), dist.mu, atol=0.05)
        np.testing.assert_allclose(jnp.cov(samples.T), cov, atol=0.08)

    def test_singular_samples_stay_on_support(self):
        """Draws from a rank-1 factor should lie on a line through mu."""
        key = jax.random.PRNGKey(3)
        sigma = jnp.array([[1.0, 0.0], [1.0, 0.0]])
        dist = DegenerateMvNormal(mu=jnp.zeros(2), sigma=sigma)

        samples = dist.sample(key, 100)

        np.testing.assert_allclose(samples[:, 0], samples[:, 1], atol=1e-12)
        assert dist.rank == 1

    def test_log_prob_matches_full_rank_normal(self):
        """Full-rank log_prob should match the usual Gaussian density."""
        cov = jnp.array([[2.0, 0.6], [0.6, 1.0]])
        mu = jnp.array([1.0, -1.0])
        x = jnp.array([0.5, 0.2])
        dist = degenerate_mvnormal_from_covariance(mu, cov)

        np.testing.assert_allclose(
            dist.log_prob(x), multivariate_normal.logpdf(x, mu, cov), rtol=1e-8
        )

    def test_log_prob_off_support(self):
        """Points off the support should have zero density."""
        sigma = jnp.array([[1.0, 0.0], [1.0, 0.0]])
        dist = DegenerateMvNormal(mu=jnp.zeros(2), sigma=sigma)

        assert dist.log_prob(jnp.array([1.0, -1.0])) == -jnp.inf
        assert jnp.isfinite(dist.log_prob(jnp.array([1.0, 1.0])))


class TestPsdSqrt:
    """Tests for the exact covariance square root."""

    def test_square_recovers_covariance(self):
        """root @ root.T should equal the covariance."""
        cov = _spd_matrix(jax.random.PRNGKey(7), 3)

        root = psd_sqrt(cov)

        np.testing.assert_allclose(root @ root.T, cov, atol=1e-10)
        np.testing.assert_allclose(root, root.T, atol=1e-10)

    def test_diagonal_covariance(self):
        """Diagonal input should give elementwise square roots."""
        root = psd_sqrt(jnp.diag(jnp.array([4.0, 9.0])))

        np.testing.assert_allclose(root, jnp.diag(jnp.array([2.0, 3.0])), atol=1e-12)

    def test_singular_covariance(self):
        """Singular PSD input should still be reproduced exactly."""
        cov = jnp.array([[1.0, 1.0], [1.0, 1.0]])

        root = psd_sqrt(cov)

        np.testing.assert_allclose(root @ root.T, cov, atol=1e-7)
