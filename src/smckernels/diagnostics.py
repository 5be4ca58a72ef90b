"""Stage progress reporting for the SMC driver.

The driver owns a ``StageReporter`` and calls it at the start and end of
each tempering stage. Output goes through a logger rather than stdout.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from smckernels.config import SMCConfig
from smckernels.core.particles import ParticleCloud
from smckernels.logging import get_logger

__all__ = ["StageReporter"]

Verbosity = Literal["none", "low", "high"]

_VERBOSITY = {"none": 0, "low": 1, "high": 2}
_RULE = "-" * 26


class StageReporter:
    """Log a summary of the particle cloud around each stage.

    Parameters
    ----------
    logger : logging.Logger, optional
        Destination logger. Defaults to the ``smckernels.diagnostics``
        logger.
    verbosity : {"none", "low", "high"}
        ``"high"`` adds the weighted mean and standard deviation of every
        parameter.
    level : int
        Level at which messages are emitted.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        verbosity: Verbosity = "low",
        level: int = logging.INFO,
    ):
        if verbosity not in _VERBOSITY:
            raise ValueError(f"unknown verbosity {verbosity!r}")
        self.logger = get_logger(__name__) if logger is None else logger
        self.verbosity = verbosity
        self.level = level

    @classmethod
    def from_config(
        cls,
        config: SMCConfig,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
    ) -> StageReporter:
        """Reporter at ``config.verbosity``."""
        return cls(logger=logger, verbosity=config.verbosity, level=level)

    def _emit(self, line: str) -> None:
        self.logger.log(self.level, line)

    def _parameter_summary(self, cloud: ParticleCloud) -> None:
        if _VERBOSITY[self.verbosity] < _VERBOSITY["high"]:
            return
        mean = cloud.weighted_mean()
        std = cloud.weighted_std()
        for name, m, s in zip(cloud.param_names, mean, std):
            self._emit(f"{name} = {round(float(m), 5)}, {round(float(s), 5)}")

    def init_stage(self, cloud: ParticleCloud) -> None:
        """Report the stage about to run."""
        if self.verbosity == "none":
            return
        phi = cloud.phi
        self._emit(_RULE)
        self._emit(f"Iteration = {cloud.stage_index} / {cloud.n_phi}")
        self._emit(_RULE)
        self._emit(f"phi = {phi}")
        self._emit(_RULE)
        self._emit(f"c = {cloud.c}")
        self._emit(_RULE)
        self._parameter_summary(cloud)

    def end_stage(self, cloud: ParticleCloud, total_sampling_time: float) -> None:
        """Report a finished stage.

        Parameters
        ----------
        cloud : ParticleCloud
            Cloud after mutation.
        total_sampling_time : float
            Seconds elapsed since sampling started.
        """
        if self.verbosity == "none":
            return
        phi = cloud.phi
        elapsed_minutes = total_sampling_time / 60
        remaining_seconds = (total_sampling_time / cloud.stage_index) * (
            cloud.n_phi - cloud.stage_index
        )
        remaining_minutes = remaining_seconds / 60

        self._emit(_RULE)
        self._emit(f"Iteration = {cloud.stage_index} / {cloud.n_phi}")
        self._emit(f"time elapsed: {round(elapsed_minutes, 4)} minutes")
        self._emit(f"estimated time remaining: {round(remaining_minutes, 4)} minutes")
        self._emit(_RULE)
        self._emit(f"phi = {phi}")
        self._emit(_RULE)
        self._emit(f"c = {cloud.c}")
        self._emit(f"accept = {cloud.accept}")
        self._emit(f"ESS = {cloud.ess}   ({cloud.resamples} total resamples.)")
        self._emit(_RULE)
        self._parameter_summary(cloud)
