"""Interface of the structural model consumed by the initializer."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from jaxtyping import Array, Float, PRNGKeyArray

__all__ = ["StructuralModel"]


@runtime_checkable
class StructuralModel(Protocol):
    """Structural model with a settable parameter vector.

    ``log_likelihood`` and ``log_prior`` are evaluated at the parameters
    most recently passed to ``set_parameters``. Either may raise for
    draws outside the model's support or when the solution fails.
    """

    def parameter_count(self) -> int:
        """Number of estimated parameters."""
        ...

    def sample_prior(
        self, key: PRNGKeyArray, n_samples: int
    ) -> Float[Array, "n_samples n_params"]:
        """Draw ``n_samples`` parameter vectors from the prior, one per row."""
        ...

    def set_parameters(self, values: Float[Array, " n_params"]) -> None:
        """Install a parameter vector."""
        ...

    def log_likelihood(self, data: Any) -> float:
        """Log-likelihood of ``data`` at the current parameters."""
        ...

    def log_prior(self) -> float:
        """Log-prior at the current parameters."""
        ...
