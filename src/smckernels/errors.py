"""Exceptions raised by the SMC kernels."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "SMCError",
    "ArtifactError",
    "InfeasibleDrawError",
    "InvalidMixtureWeightError",
]


class SMCError(Exception):
    """Base class for all smckernels errors."""


class ArtifactError(SMCError):
    """A mode or Hessian artifact is missing or unreadable."""

    def __init__(self, kind: str, path: Path | str | None):
        self.kind = kind
        self.path = path
        super().__init__(f"There does not exist a valid {kind} file at {path}")


class InfeasibleDrawError(SMCError):
    """No draw with a finite evaluation was found for a particle."""

    def __init__(self, particle_index: int, attempts: int):
        self.particle_index = particle_index
        self.attempts = attempts
        super().__init__(
            f"Particle {particle_index}: could not find a feasible draw "
            f"after {attempts} attempts"
        )


class InvalidMixtureWeightError(SMCError, ValueError):
    """Mixture weight outside of [0, 1]."""

    def __init__(self, alpha: float):
        self.alpha = alpha
        super().__init__(f"mixture weight alpha must lie in [0, 1], got {alpha}")
