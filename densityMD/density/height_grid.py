"""HeightGrid class for densities projected onto the plane normal to an axis."""

from __future__ import annotations

import numpy as np

from densityMD.cell import box_lengths, wrap_positions
from densityMD.density._base import Accumulator
from densityMD.density.constants import in_plane_axes, validate_axis


class HeightGrid(Accumulator):
    """
    Two-dimensional density map on the plane orthogonal to *normal_axis*.

    Every cell is a column spanning the full box height, so a deposit adds
    ``weight * rows * cols / (bx * by * bz)`` to the cell under the atom.

    Parameters
    ----------
    shape : tuple of int
        ``(rows, cols)``: cells along the first and second in-plane axis.
    normal_axis : int or {'X', 'Y', 'Z'}
        Axis collapsed by the projection. The in-plane axes are the two
        others, in ascending order.
    ngroups : int
        Number of atom groups.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Quantity carried by the deposited weights.

    Attributes
    ----------
    grids : np.ndarray, shape (ngroups, rows, cols)
        Accumulated totals; holds the density after :meth:`finalize`.
    axes : tuple of int
        ``(normal, first in-plane, second in-plane)``.
    widths : np.ndarray, shape (2,)
        Cell widths of the current frame.
    box_width_sum : np.ndarray, shape (2,)
        Sum over frames of the in-plane box lengths.
    inverse_volume : float
        Inverse cell volume of the current frame.
    """

    def __init__(
        self,
        shape: tuple[int, int],
        normal_axis: int | str = 2,
        ngroups: int = 1,
        density_type: str = 'mass',
    ):
        rows, cols = (int(n) for n in shape)
        if rows <= 0 or cols <= 0:
            raise ValueError(f"I can not build a grid with this dimensions: ({rows}, {cols})")
        super().__init__(ngroups, density_type)
        self.shape = (rows, cols)
        normal_axis = validate_axis(normal_axis)
        self.axes = (normal_axis, *in_plane_axes(normal_axis))

        self.grids = np.zeros((self.ngroups, rows, cols), dtype=np.float64)
        self.widths = np.zeros(2, dtype=np.float64)
        self.box_width_sum = np.zeros(2, dtype=np.float64)
        self.inverse_volume = 0.0
        self._box = np.zeros(3, dtype=np.float64)

    def start_frame(self, cell_matrix: np.ndarray) -> None:
        """
        Update cell geometry for a new frame.

        Parameters
        ----------
        cell_matrix : np.ndarray, shape (3, 3) or (3,)
            Cell matrix (or edge lengths) of the frame.
        """
        box = box_lengths(cell_matrix)
        self._begin_frame()
        self._box = box
        in_plane = box[list(self.axes[1:])]
        self.widths = in_plane / np.asarray(self.shape, dtype=np.float64)
        self.box_width_sum += in_plane
        self.inverse_volume = (self.shape[0] * self.shape[1]) / float(box[0] * box[1] * box[2])

    def deposit(self, group: int, positions: np.ndarray, weights: float | np.ndarray = 1.0) -> None:
        """
        Add atoms of one group to the grid.

        Parameters
        ----------
        group : int
            Group index in ``[0, ngroups)``.
        positions : np.ndarray, shape (N, 3) or (3,)
            Atom positions; they are wrapped into the box on all three axes.
        weights : float or np.ndarray, shape (N,)
            Per-atom mass, charge, electron count or 1.
        """
        self._check_deposit(group)
        positions, weights = self._as_arrays(positions, weights)

        wrapped = wrap_positions(positions, self._box)
        i = np.floor(wrapped[:, self.axes[1]] / self.widths[0]).astype(np.int64)
        j = np.floor(wrapped[:, self.axes[2]] / self.widths[1]).astype(np.int64)
        # an atom on the upper box edge after rounding lands one cell past the end
        in_range = (i >= 0) & (i < self.shape[0]) & (j >= 0) & (j < self.shape[1])
        self._report_dropped(int(np.count_nonzero(~in_range)))

        np.add.at(self.grids[group], (i[in_range], j[in_range]), weights[in_range] * self.inverse_volume)

    def finalize(self) -> np.ndarray:
        """
        Average the grids over frames.

        Returns
        -------
        np.ndarray, shape (ngroups, rows, cols)
            Densities (kg/m^3 for mass, per nm^3 otherwise).
        """
        return self._normalise(self.grids)

    @property
    def mean_widths(self) -> np.ndarray:
        """Cell widths averaged over the frames seen so far."""
        if self.nframes == 0:
            return np.zeros(2, dtype=np.float64)
        return self.box_width_sum / self.nframes / np.asarray(self.shape, dtype=np.float64)
