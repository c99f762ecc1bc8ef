"""
Shared bookkeeping for streaming density accumulators.

Every accumulator follows the same life cycle::

    initialized --start_frame--> accumulating --finalize--> finalized
                                   ^      |
                                   +------+ start_frame / deposit

``deposit`` is only valid while accumulating, and ``finalize`` runs exactly
once: it divides the accumulated totals by the number of frames observed.
"""

from __future__ import annotations

import logging

import numpy as np

from densityMD.density.constants import validate_density_type
from densityMD.utils.conversion_factors import density_conversion_factor

logger = logging.getLogger(__name__)


class NoFramesError(RuntimeError):
    """Raised when an accumulator is finalised without having observed a frame."""
    pass


class Accumulator:
    """
    Frame counting, state checks and normalisation common to all profiles.

    Parameters
    ----------
    ngroups : int
        Number of atom groups binned side by side.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Quantity carried by the deposited weights. Mass densities are
        converted from amu/nm^3 to kg/m^3 on finalize.

    Attributes
    ----------
    nframes : int
        Number of frames started so far.
    n_dropped : int
        Number of atom deposits skipped because their bin fell outside the
        configured range.
    progress : {'initialized', 'accumulating', 'finalized'}
        Life-cycle state.
    """

    def __init__(self, ngroups: int, density_type: str):
        if int(ngroups) <= 0:
            raise ValueError(f"ngroups must be a positive integer, got {ngroups}.")
        self.ngroups = int(ngroups)
        self.density_type = validate_density_type(density_type)
        self.nframes = 0
        self.n_dropped = 0
        self.progress = 'initialized'

    def _begin_frame(self) -> None:
        if self.progress == 'finalized':
            raise RuntimeError(f"{type(self).__name__} is finalized; start_frame() is no longer allowed.")
        self.nframes += 1
        self.progress = 'accumulating'

    def _check_deposit(self, group: int) -> None:
        if self.progress == 'initialized':
            raise RuntimeError("Call start_frame() before deposit().")
        if self.progress == 'finalized':
            raise RuntimeError(f"{type(self).__name__} is finalized; deposit() is no longer allowed.")
        if not 0 <= group < self.ngroups:
            raise IndexError(f"Group index {group} out of range for {self.ngroups} groups.")

    @staticmethod
    def _as_arrays(positions: np.ndarray, weights: float | np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(N, 3)`` positions and ``(N,)`` weights."""
        positions = np.atleast_2d(np.asarray(positions, dtype=np.float64))
        weights = np.broadcast_to(np.asarray(weights, dtype=np.float64), (positions.shape[0],))
        return positions, weights

    def _report_dropped(self, count: int) -> None:
        if count:
            self.n_dropped += count
            logger.debug(
                "%s: dropped %d atom(s) with an out-of-range bin in frame %d",
                type(self).__name__, count, self.nframes,
            )

    def _normalise(self, totals: np.ndarray) -> np.ndarray:
        """Divide *totals* in place by the frame count and convert units."""
        if self.progress == 'finalized':
            raise RuntimeError("finalize() has already been called.")
        if self.nframes == 0:
            raise NoFramesError(f"{type(self).__name__}: no frames were processed.")
        totals /= self.nframes
        totals *= density_conversion_factor(self.density_type)
        self.progress = 'finalized'
        return totals
