"""Particle containers and weight utilities."""

from smckernels.core.particles import Particle, ParticleCloud, init_particle_cloud
from smckernels.core.weights import compute_ess, normalize_log_weights

__all__ = [
    "Particle",
    "ParticleCloud",
    "init_particle_cloud",
    "compute_ess",
    "normalize_log_weights",
]
