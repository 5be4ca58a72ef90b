"""Configuration for the SMC kernels."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import jax
from jaxtyping import PRNGKeyArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "SMCConfig",
    "MODE_FILENAME",
    "HESSIAN_FILENAME",
]

MODE_FILENAME = "paramsmode.npz"
HESSIAN_FILENAME = "hessian.npz"


class SMCConfig(BaseModel):
    """Settings shared by the cloud, the initializer and the reporter.

    Attributes
    ----------
    n_particles : int
        Number of particles in the cloud.
    seed : int
        Seed for the root PRNG key, see ``prng_key``.
    initial_draw_source : {"prior", "normal"}
        Draw the initial cloud from the prior or from a Laplace
        approximation built from the mode and Hessian artifacts.
    mode_path, hessian_path : Path, optional
        Locations of the ``.npz`` artifacts. Required for ``"normal"``.
    mode_key, hessian_key : str
        Array names inside the artifacts.
    eigenvalue_threshold : float
        Hessian eigenvalues at or below this are treated as zero curvature.
    max_init_attempts : int
        Upper bound on draws tried per particle during initialization.
    initial_scale : float
        Initial proposal scale ``c`` of a cloud built from this config.
    verbosity : {"none", "low", "high"}
        Stage reporting verbosity.
    """

    model_config = ConfigDict(frozen=True)

    n_particles: int = Field(default=1000, gt=0)
    seed: int = 42
    initial_draw_source: Literal["prior", "normal"] = "prior"
    mode_path: Path | None = None
    hessian_path: Path | None = None
    mode_key: str = "params"
    hessian_key: str = "hessian"
    eigenvalue_threshold: float = Field(default=1e-6, gt=0.0)
    max_init_attempts: int = Field(default=10_000, gt=0)
    initial_scale: float = Field(default=0.5, gt=0.0)
    verbosity: Literal["none", "low", "high"] = "low"

    @model_validator(mode="after")
    def _artifacts_for_normal_source(self) -> SMCConfig:
        if self.initial_draw_source == "normal" and (
            self.mode_path is None or self.hessian_path is None
        ):
            raise ValueError(
                "mode_path and hessian_path are required when "
                "initial_draw_source is 'normal'"
            )
        return self

    @classmethod
    def with_artifact_dir(cls, directory: Path | str, **kwargs: Any) -> SMCConfig:
        """Config drawing from the Laplace approximation stored in ``directory``."""
        directory = Path(directory)
        kwargs.setdefault("initial_draw_source", "normal")
        return cls(
            mode_path=directory / MODE_FILENAME,
            hessian_path=directory / HESSIAN_FILENAME,
            **kwargs,
        )

    def prng_key(self) -> PRNGKeyArray:
        """Root PRNG key derived from ``seed``."""
        return jax.random.PRNGKey(self.seed)
