"""Initial population of the particle cloud.

Particles are drawn either from the prior or from a Laplace approximation
built from a stored posterior mode and Hessian. Draws whose evaluation
fails are replaced by fresh draws from the same source.
"""

from __future__ import annotations

import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np
from beartype import beartype
from jaxtyping import Array, Float, PRNGKeyArray, jaxtyped

from smckernels.config import SMCConfig
from smckernels.core.particles import ParticleCloud
from smckernels.distributions.degenerate import degenerate_mvnormal_from_hessian
from smckernels.errors import ArtifactError, InfeasibleDrawError
from smckernels.logging import get_logger
from smckernels.models.base import StructuralModel

__all__ = [
    "initial_draw",
    "load_mode_artifacts",
    "save_mode_artifacts",
]

logger = get_logger(__name__)

SampleFn = Callable[[PRNGKeyArray, int], Float[Array, "n_samples n_params"]]


def _read_artifact(kind: str, path: Path | None, key: str) -> np.ndarray:
    if path is None:
        raise ArtifactError(kind, path)
    try:
        with np.load(path, allow_pickle=False) as archive:
            return np.asarray(archive[key], dtype=np.float64)
    except (
        OSError,
        KeyError,
        ValueError,
        TypeError,
        AttributeError,
        EOFError,
        zipfile.BadZipFile,
        zlib.error,
    ) as err:
        raise ArtifactError(kind, path) from err


def load_mode_artifacts(
    config: SMCConfig,
) -> tuple[Float[Array, " n_params"], Float[Array, "n_params n_params"]]:
    """Load the posterior mode and Hessian named in ``config``.

    Raises
    ------
    ArtifactError
        If either file is missing, unreadable, lacks its key, or the two
        arrays have incompatible shapes.
    """
    params = _read_artifact("mode", config.mode_path, config.mode_key)
    hessian = _read_artifact("hessian", config.hessian_path, config.hessian_key)

    if params.ndim != 1:
        raise ArtifactError("mode", config.mode_path)
    n = params.shape[0]
    if hessian.shape != (n, n):
        raise ArtifactError("hessian", config.hessian_path)

    return jnp.asarray(params), jnp.asarray(hessian)


def save_mode_artifacts(
    params: Float[Array, " n_params"],
    hessian: Float[Array, "n_params n_params"],
    mode_path: Path | str,
    hessian_path: Path | str,
    mode_key: str = "params",
    hessian_key: str = "hessian",
) -> None:
    """Write a posterior mode and Hessian as ``.npz`` archives.

    Files are written at exactly the given paths; no ``.npz`` suffix is
    appended.
    """
    with open(mode_path, "wb") as f:
        np.savez(f, **{mode_key: np.asarray(params, dtype=np.float64)})
    with open(hessian_path, "wb") as f:
        np.savez(f, **{hessian_key: np.asarray(hessian, dtype=np.float64)})


def _feasible_draw(
    key: PRNGKeyArray,
    index: int,
    draw: Float[Array, " n_params"],
    model: StructuralModel,
    data: Any,
    sample_fn: SampleFn,
    max_attempts: int,
) -> tuple[Float[Array, " n_params"], float, float, int]:
    """Evaluate ``draw``, redrawing until the model accepts it."""
    for attempt in range(max_attempts):
        try:
            model.set_parameters(draw)
            loglh = float(model.log_likelihood(data))
            logpost = float(model.log_prior())
        except Exception as err:
            logger.debug(
                "Particle %d: draw %d rejected (%s: %s)",
                index,
                attempt + 1,
                type(err).__name__,
                err,
            )
            key, subkey = jax.random.split(key)
            draw = sample_fn(subkey, 1)[0]
            continue
        return draw, loglh, logpost, attempt

    raise InfeasibleDrawError(index, max_attempts)


@jaxtyped(typechecker=beartype)
def initial_draw(
    key: PRNGKeyArray,
    model: StructuralModel,
    data: Any,
    cloud: ParticleCloud,
    config: SMCConfig | None = None,
) -> None:
    """Populate ``cloud`` with an initial set of feasible draws.

    The cloud is only written after every particle has a feasible draw,
    so a failure leaves it untouched.

    Parameters
    ----------
    key : PRNGKeyArray
        Random key.
    model : StructuralModel
        Model providing the prior, likelihood and parameter installation.
    data : Any
        Data passed to ``model.log_likelihood``.
    cloud : ParticleCloud
        Cloud to fill. Its particle count fixes the number of draws.
    config : SMCConfig, optional
        Draw source, artifact locations and retry bound. Its
        ``n_particles`` must match the cloud. Defaults to prior draws
        for a cloud of any size.

    Raises
    ------
    ValueError
        If ``config.n_particles`` differs from the cloud size.
    ArtifactError
        If the Laplace source is selected and the artifacts can't be read.
    InfeasibleDrawError
        If some particle has no feasible draw within
        ``config.max_init_attempts`` attempts.
    """
    n_particles = cloud.n_particles
    if config is None:
        config = SMCConfig(n_particles=n_particles)
    elif config.n_particles != n_particles:
        raise ValueError(
            f"config expects {config.n_particles} particles, "
            f"cloud has {n_particles}"
        )

    if config.initial_draw_source == "normal":
        params, hessian = load_mode_artifacts(config)
        dist = degenerate_mvnormal_from_hessian(
            params, hessian, config.eigenvalue_threshold
        )
        logger.info(
            "Initial draws from Laplace approximation (rank %d of %d)",
            dist.rank,
            dist.dim,
        )
        sample_fn: SampleFn = dist.sample
    else:
        logger.info("Initial draws from the prior")
        sample_fn = model.sample_prior

    batch_key, retry_key = jax.random.split(key)
    draws = sample_fn(batch_key, n_particles)
    retry_keys = jax.random.split(retry_key, n_particles)

    accepted = []
    loglh = []
    logpost = []
    n_redraws = 0
    for i in range(n_particles):
        draw, ll, lp, redraws = _feasible_draw(
            retry_keys[i],
            i,
            draws[i],
            model,
            data,
            sample_fn,
            config.max_init_attempts,
        )
        accepted.append(draw)
        loglh.append(ll)
        logpost.append(lp)
        n_redraws += redraws

    if n_redraws:
        logger.info("Replaced %d infeasible initial draws", n_redraws)

    cloud.update_draws(jnp.stack(accepted))
    cloud.update_loglh(jnp.asarray(loglh))
    cloud.update_logpost(jnp.asarray(logpost))
