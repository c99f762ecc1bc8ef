"""SlabProfile class for one-dimensional density profiles along a box axis."""

from __future__ import annotations

import numpy as np

from densityMD.cell import box_lengths, wrap_coordinates
from densityMD.density._base import Accumulator
from densityMD.density.constants import validate_axis


class SlabProfile(Accumulator):
    """
    Density profile in slices along one box axis.

    Each slice is a parallelepiped spanning the box cross-section, so a
    deposit adds ``weight * nslices / (bx * by * bz)`` to the slice holding
    the atom. The slice width follows the box from frame to frame.

    Parameters
    ----------
    nslices : int
        Number of slices along *axis*.
    axis : int or {'X', 'Y', 'Z'}
        Axis of the profile.
    ngroups : int
        Number of atom groups.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Quantity carried by the deposited weights.

    Attributes
    ----------
    bins : np.ndarray, shape (ngroups, nslices)
        Accumulated totals; holds the density after :meth:`finalize`.
    slice_width : float
        Slice width of the current frame.
    inverse_volume : float
        Inverse slice volume of the current frame.
    box_extent_sum : float
        Sum over frames of the box length along *axis*.
    """

    def __init__(
        self,
        nslices: int,
        axis: int | str = 2,
        ngroups: int = 1,
        density_type: str = 'mass',
    ):
        if int(nslices) <= 0:
            raise ValueError(f"I can not build a profile with this number of slices: {nslices}")
        super().__init__(ngroups, density_type)
        self.nslices = int(nslices)
        self.axis = validate_axis(axis)

        self.bins = np.zeros((self.ngroups, self.nslices), dtype=np.float64)
        self.slice_width = 0.0
        self.inverse_volume = 0.0
        self.box_extent_sum = 0.0
        self._box_length = 0.0

    def start_frame(self, cell_matrix: np.ndarray) -> None:
        """
        Update slice geometry for a new frame.

        Parameters
        ----------
        cell_matrix : np.ndarray, shape (3, 3) or (3,)
            Cell matrix (or edge lengths) of the frame.
        """
        box = box_lengths(cell_matrix)
        self._begin_frame()
        self._box_length = float(box[self.axis])
        self.slice_width = self._box_length / self.nslices
        self.inverse_volume = self.nslices / float(box[0] * box[1] * box[2])
        self.box_extent_sum += self._box_length

    def deposit(self, group: int, positions: np.ndarray, weights: float | np.ndarray = 1.0) -> None:
        """
        Add atoms of one group to the profile.

        Parameters
        ----------
        group : int
            Group index in ``[0, ngroups)``.
        positions : np.ndarray, shape (N, 3) or (3,)
            Atom positions.
        weights : float or np.ndarray, shape (N,)
            Per-atom mass, charge, electron count or 1.
        """
        self._check_deposit(group)
        positions, weights = self._as_arrays(positions, weights)

        coordinate = wrap_coordinates(positions[:, self.axis], self._box_length)
        slices = np.floor(coordinate / self.slice_width).astype(np.int64)
        in_range = (slices >= 0) & (slices < self.nslices)
        self._report_dropped(int(np.count_nonzero(~in_range)))

        np.add.at(self.bins[group], slices[in_range], weights[in_range] * self.inverse_volume)

    def finalize(self) -> np.ndarray:
        """
        Average the profile over frames.

        Returns
        -------
        np.ndarray, shape (ngroups, nslices)
            Densities (kg/m^3 for mass, per nm^3 otherwise).
        """
        return self._normalise(self.bins)

    @property
    def mean_slice_width(self) -> float:
        """Slice width averaged over the frames seen so far."""
        if self.nframes == 0:
            return 0.0
        return self.box_extent_sum / self.nframes / self.nslices

    def slice_coordinates(self) -> np.ndarray:
        """Lower edge of each slice, using the mean slice width."""
        return np.arange(self.nslices) * self.mean_slice_width


def symmetrize(profile: np.ndarray) -> np.ndarray:
    """
    Average each slice with its mirror image about the profile centre.

    Parameters
    ----------
    profile : np.ndarray, shape (..., nslices)
        Profile(s); the last axis is mirrored.

    Returns
    -------
    np.ndarray
        ``(profile[..., i] + profile[..., N-1-i]) / 2``.
    """
    profile = np.asarray(profile, dtype=np.float64)
    return (profile + profile[..., ::-1]) * 0.5
