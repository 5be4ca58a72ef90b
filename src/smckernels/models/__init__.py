"""Model interfaces consumed by the SMC kernels."""

from smckernels.models.base import StructuralModel

__all__ = ["StructuralModel"]
