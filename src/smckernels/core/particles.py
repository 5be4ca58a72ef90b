"""Particle cloud management for tempered SMC.

The cloud is owned by the outer driver. The kernels in this package
fill it in place, one row per particle.
"""

from __future__ import annotations

import chex
import jax.numpy as jnp
from jaxtyping import Array, Float

from smckernels.config import SMCConfig
from smckernels.core.weights import normalize_log_weights

__all__ = [
    "Particle",
    "ParticleCloud",
    "init_particle_cloud",
]


@chex.dataclass(frozen=True)
class Particle:
    """A single weighted parameter draw.

    Attributes
    ----------
    draw : Array
        Parameter vector with shape [n_params].
    loglh : Array
        Log-likelihood at ``draw`` (scalar).
    logpost : Array
        Log-prior contribution at ``draw`` (scalar).
    log_weight : Array
        Unnormalized log-weight (scalar).
    """

    draw: Float[Array, " n_params"]
    loglh: Float[Array, ""]
    logpost: Float[Array, ""]
    log_weight: Float[Array, ""]


@chex.dataclass
class ParticleCloud:
    """Mutable particle population plus stage metadata.

    Attributes
    ----------
    draws : Array
        Parameter draws with shape [n_particles, n_params].
    loglh : Array
        Log-likelihood per particle with shape [n_particles].
    logpost : Array
        Log-posterior per particle with shape [n_particles].
    log_weights : Array
        Unnormalized log-weights with shape [n_particles].
    tempering_schedule : Array
        Tempering exponents phi with shape [n_phi].
    stage_index : int
        Current stage, counted from 1 as reported to users.
    c : float
        Current proposal scale.
    accept : float
        Latest Metropolis acceptance rate.
    ess : float
        Latest effective sample size.
    resamples : int
        Number of resampling steps so far.
    param_names : tuple of str
        Parameter names used in diagnostics.
    """

    draws: Float[Array, "n_particles n_params"]
    loglh: Float[Array, " n_particles"]
    logpost: Float[Array, " n_particles"]
    log_weights: Float[Array, " n_particles"]
    tempering_schedule: Float[Array, " n_phi"]
    stage_index: int = 1
    c: float = 0.5
    accept: float = 0.25
    ess: float = 0.0
    resamples: int = 0
    param_names: tuple[str, ...] = ()

    @property
    def n_particles(self) -> int:
        """Number of particles."""
        return self.draws.shape[0]

    @property
    def n_params(self) -> int:
        """Number of parameters per particle."""
        return self.draws.shape[1]

    @property
    def n_phi(self) -> int:
        """Total number of tempering stages."""
        return self.tempering_schedule.shape[0]

    @property
    def phi(self) -> float:
        """Tempering exponent of the current stage.

        Raises
        ------
        ValueError
            If ``stage_index`` is outside ``1..n_phi``.
        """
        if not 1 <= self.stage_index <= self.n_phi:
            raise ValueError(
                f"stage_index must lie in [1, {self.n_phi}], got {self.stage_index}"
            )
        return float(self.tempering_schedule[self.stage_index - 1])

    @classmethod
    def from_config(
        cls,
        config: SMCConfig,
        n_params: int,
        tempering_schedule: Float[Array, " n_phi"] | None = None,
        param_names: tuple[str, ...] | None = None,
    ) -> ParticleCloud:
        """Empty cloud sized and scaled by ``config``."""
        return init_particle_cloud(
            config.n_particles,
            n_params,
            tempering_schedule=tempering_schedule,
            param_names=param_names,
            c=config.initial_scale,
        )

    def particle(self, index: int) -> Particle:
        """Return a read-only view of particle ``index``."""
        return Particle(
            draw=self.draws[index],
            loglh=self.loglh[index],
            logpost=self.logpost[index],
            log_weight=self.log_weights[index],
        )

    def _check_count(self, name: str, values: Array) -> None:
        if values.shape[0] != self.n_particles:
            raise ValueError(
                f"{name} has {values.shape[0]} entries, "
                f"cloud has {self.n_particles} particles"
            )

    def update_draws(self, draws: Float[Array, "n_particles n_params"]) -> None:
        """Replace all draws; row i goes to particle i."""
        self._check_count("draws", draws)
        if draws.ndim != 2 or draws.shape[1] != self.n_params:
            raise ValueError(
                f"draws must have shape ({self.n_particles}, {self.n_params}), "
                f"got {draws.shape}"
            )
        self.draws = draws

    def update_loglh(self, loglh: Float[Array, " n_particles"]) -> None:
        """Replace all log-likelihoods."""
        self._check_count("loglh", loglh)
        self.loglh = loglh

    def update_logpost(self, logpost: Float[Array, " n_particles"]) -> None:
        """Replace all log-posteriors."""
        self._check_count("logpost", logpost)
        self.logpost = logpost

    def normalized_weights(self) -> Float[Array, " n_particles"]:
        """Return normalized weights (not log)."""
        return jnp.exp(normalize_log_weights(self.log_weights))

    def weighted_mean(self) -> Float[Array, " n_params"]:
        """Compute weighted mean of the draws."""
        weights = self.normalized_weights()
        return jnp.sum(self.draws * weights[:, None], axis=0)

    def weighted_cov(self) -> Float[Array, "n_params n_params"]:
        """Compute weighted covariance of the draws."""
        weights = self.normalized_weights()
        centered = self.draws - self.weighted_mean()
        return jnp.einsum("i,ij,ik->jk", weights, centered, centered)

    def weighted_std(self) -> Float[Array, " n_params"]:
        """Compute weighted marginal standard deviations."""
        return jnp.sqrt(jnp.diag(self.weighted_cov()))


def init_particle_cloud(
    n_particles: int,
    n_params: int,
    tempering_schedule: Float[Array, " n_phi"] | None = None,
    param_names: tuple[str, ...] | None = None,
    c: float = 0.5,
) -> ParticleCloud:
    """Create an empty cloud with uniform weights.

    Parameters
    ----------
    n_particles : int
        Number of particles.
    n_params : int
        Number of model parameters.
    tempering_schedule : Array, optional
        Tempering exponents. Defaults to 100 evenly spaced values in [0, 1].
    param_names : tuple of str, optional
        Parameter names. Defaults to ``theta[0]``, ``theta[1]``, ...
    c : float
        Initial proposal scale.

    Returns
    -------
    cloud : ParticleCloud
        Cloud with zero draws, likelihoods and log-weights.
    """
    if tempering_schedule is None:
        tempering_schedule = jnp.linspace(0.0, 1.0, 100)
    if param_names is None:
        param_names = tuple(f"theta[{i}]" for i in range(n_params))
    if len(param_names) != n_params:
        raise ValueError(
            f"expected {n_params} parameter names, got {len(param_names)}"
        )

    return ParticleCloud(
        draws=jnp.zeros((n_particles, n_params)),
        loglh=jnp.zeros(n_particles),
        logpost=jnp.zeros(n_particles),
        log_weights=jnp.zeros(n_particles),
        tempering_schedule=jnp.asarray(tempering_schedule),
        c=c,
        param_names=tuple(param_names),
    )
