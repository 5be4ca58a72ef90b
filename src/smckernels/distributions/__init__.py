"""Probability distributions used by the SMC kernels."""

from smckernels.distributions.degenerate import (
    DegenerateMvNormal,
    degenerate_mvnormal_from_covariance,
    degenerate_mvnormal_from_hessian,
    pseudo_inverse_sqrt,
    psd_sqrt,
)

__all__ = [
    "DegenerateMvNormal",
    "degenerate_mvnormal_from_hessian",
    "degenerate_mvnormal_from_covariance",
    "pseudo_inverse_sqrt",
    "psd_sqrt",
]
