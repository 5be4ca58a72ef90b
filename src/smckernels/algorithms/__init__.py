"""SMC kernel implementations.

- Initialization - Prior or Laplace draws with repair of infeasible draws
- Mutation proposals - Three-component Gaussian candidate generator
- Tempered densities - Incremental reweighting between stages
"""

from smckernels.algorithms.density import (
    incremental_log_weight,
    log_tempered_density,
    tempered_density,
)
from smckernels.algorithms.initialization import (
    initial_draw,
    load_mode_artifacts,
    save_mode_artifacts,
)
from smckernels.algorithms.mutation import (
    mixture_components,
    mvnormal_mixture_draw,
)

__all__ = [
    # Density
    "tempered_density",
    "log_tempered_density",
    "incremental_log_weight",
    # Initialization
    "initial_draw",
    "load_mode_artifacts",
    "save_mode_artifacts",
    # Mutation
    "mixture_components",
    "mvnormal_mixture_draw",
]
