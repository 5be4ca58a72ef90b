"""Numerical kernels for tempered Sequential Monte Carlo.

This package provides the pieces of an SMC sampler for structural models
that sit below the driver loop:
- Initial population of the particle cloud from the prior or a Laplace
  approximation
- The three-component Gaussian proposal used by the mutation step
- Tempered measurement densities for reweighting between stages
- Stage reporting through the logging system
"""

from __future__ import annotations

from smckernels.algorithms import (
    incremental_log_weight,
    initial_draw,
    load_mode_artifacts,
    log_tempered_density,
    mixture_components,
    mvnormal_mixture_draw,
    save_mode_artifacts,
    tempered_density,
)
from smckernels.config import SMCConfig
from smckernels.core.particles import Particle, ParticleCloud, init_particle_cloud
from smckernels.diagnostics import StageReporter
from smckernels.distributions import (
    DegenerateMvNormal,
    degenerate_mvnormal_from_covariance,
    degenerate_mvnormal_from_hessian,
)
from smckernels.errors import (
    ArtifactError,
    InfeasibleDrawError,
    InvalidMixtureWeightError,
    SMCError,
)
from smckernels.models.base import StructuralModel

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "SMCConfig",
    # Particles
    "Particle",
    "ParticleCloud",
    "init_particle_cloud",
    # Distributions
    "DegenerateMvNormal",
    "degenerate_mvnormal_from_hessian",
    "degenerate_mvnormal_from_covariance",
    # Algorithms
    "initial_draw",
    "load_mode_artifacts",
    "save_mode_artifacts",
    "mixture_components",
    "mvnormal_mixture_draw",
    "tempered_density",
    "log_tempered_density",
    "incremental_log_weight",
    # Reporting
    "StageReporter",
    # Models
    "StructuralModel",
    # Errors
    "SMCError",
    "ArtifactError",
    "InfeasibleDrawError",
    "InvalidMixtureWeightError",
]
