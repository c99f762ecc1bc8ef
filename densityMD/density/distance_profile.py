"""DistanceProfile class for densities as a function of distance to a reference group."""

from __future__ import annotations

import numpy as np

from densityMD.cell import box_lengths
from densityMD.density._base import Accumulator
from densityMD.density.constants import validate_axis
from densityMD.distance.distance_helpers import (
    ZeroReferenceMassError,
    annulus_volume,
    center_of_mass,
    distance_to_point,
    get_backend_functions as _get_distance_backend_functions,
    project,
    shell_volume,
)

# Module-level backend function (loaded once at import)
_minimum_distances = _get_distance_backend_functions()


class DistanceProfile(Accumulator):
    """
    Density profile in shells (3D) or cylindrical annuli (2D) around a
    reference group.

    The distance of an atom is either its minimum-image distance to the
    nearest reference atom, or its distance to the reference centre of mass.
    In 2D mode distances are measured in the plane orthogonal to
    *normal_axis* and each annulus spans the full box height.

    The largest binned distance is half the smallest box length over the
    axes that enter the distance. It is recomputed every frame, so bin
    edges follow the box; the reported x axis uses its average over frames.

    Parameters
    ----------
    nslices : int
        Number of distance bins.
    normal_axis : int or {'X', 'Y', 'Z'}
        Axis excluded from distances in 2D mode; the cylinder axis.
    ngroups : int
        Number of atom groups.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Quantity carried by the deposited weights.
    reference_indices : np.ndarray
        Atom indices of the reference group.
    reference_masses : np.ndarray, optional
        Masses of the reference atoms. Required when *use_com* is True.
    use_3d : bool, optional
        Bin in spherical shells using all three axes (default: True).
    use_com : bool, optional
        Measure distances to the reference centre of mass instead of the
        nearest reference atom (default: False).

    Attributes
    ----------
    bins : np.ndarray, shape (ngroups, nslices)
        Accumulated totals; holds the density after :meth:`finalize`.
    max_distance : float
        Largest binned distance in the current frame.
    width : float
        Bin width in the current frame.
    height : float
        Box length along *normal_axis* in the current frame.
    max_distance_sum : float
        Sum over frames of *max_distance*.
    reference_com : np.ndarray or None
        Projected reference centre of mass of the current frame (COM mode).

    Raises
    ------
    ValueError
        If *nslices* is not positive, the reference group is empty, or
        masses are missing in COM mode.
    ZeroReferenceMassError
        If the reference group has zero total mass in COM mode.
    """

    def __init__(
        self,
        nslices: int,
        normal_axis: int | str = 2,
        ngroups: int = 1,
        density_type: str = 'mass',
        reference_indices: np.ndarray | None = None,
        reference_masses: np.ndarray | None = None,
        use_3d: bool = True,
        use_com: bool = False,
    ):
        if int(nslices) <= 0:
            raise ValueError(f"I can not build a distance profile with this length: {nslices}")
        super().__init__(ngroups, density_type)
        self.nslices = int(nslices)
        self.normal_axis = validate_axis(normal_axis)
        self.use_3d = bool(use_3d)
        self.use_com = bool(use_com)

        if reference_indices is None or len(reference_indices) == 0:
            raise ValueError("A distance profile needs a non-empty reference group.")
        self.reference_indices = np.asarray(reference_indices, dtype=np.int64)

        # 3D: every axis enters the distance; 2D: the normal axis is dropped
        self.excluded_axis = None if self.use_3d else self.normal_axis
        self.included_axes = tuple(
            a for a in range(3) if self.use_3d or a != self.normal_axis
        )

        self.reference_masses = None
        self.reference_mass = 0.0
        if self.use_com:
            if reference_masses is None:
                raise ValueError("Centre-of-mass distances need the reference group masses.")
            self.reference_masses = np.asarray(reference_masses, dtype=np.float64)
            if self.reference_masses.shape != self.reference_indices.shape:
                raise ValueError("Reference masses and indices are incommensurate.")
            self.reference_mass = float(self.reference_masses.sum())
            if self.reference_mass == 0:
                raise ZeroReferenceMassError("The reference group has a total mass of zero.")

        self.bins = np.zeros((self.ngroups, self.nslices), dtype=np.float64)
        self.max_distance = 0.0
        self.width = 0.0
        self.height = 0.0
        self.max_distance_sum = 0.0
        self.reference_com: np.ndarray | None = None
        self._cell_matrix = np.eye(3)

    def start_frame(self, cell_matrix: np.ndarray, positions: np.ndarray) -> None:
        """
        Update bin geometry (and reference centre of mass) for a new frame.

        Parameters
        ----------
        cell_matrix : np.ndarray, shape (3, 3) or (3,)
            Cell matrix (or edge lengths) of the frame.
        positions : np.ndarray, shape (n_atoms, 3)
            Positions of every atom in the frame.
        """
        box = box_lengths(cell_matrix)
        self._begin_frame()
        cell = np.asarray(cell_matrix, dtype=np.float64)
        self._cell_matrix = cell if cell.shape == (3, 3) else np.diag(box)

        self.max_distance = float(min(box[a] / 2 for a in self.included_axes))
        self.width = self.max_distance / self.nslices
        self.max_distance_sum += self.max_distance
        self.height = float(box[self.normal_axis])

        if self.use_com:
            com = center_of_mass(
                self.reference_indices, positions, self.reference_masses, self.reference_mass,
            )
            self.reference_com = project(com, self.excluded_axis)

    def distances(self, atom_indices: np.ndarray, positions: np.ndarray) -> np.ndarray:
        """
        Distance of each atom from the reference group in the current frame.

        Parameters
        ----------
        atom_indices : np.ndarray
            Indices of the query atoms in *positions*.
        positions : np.ndarray, shape (n_atoms, 3)
            Positions of every atom in the frame.

        Returns
        -------
        np.ndarray
            One distance per query atom.
        """
        positions = np.asarray(positions, dtype=np.float64)
        points = positions[np.asarray(atom_indices, dtype=np.int64)]
        if self.use_com:
            return distance_to_point(points, self.reference_com, self._cell_matrix, self.excluded_axis)
        return _minimum_distances(
            points, positions[self.reference_indices], self._cell_matrix, self.excluded_axis,
        )

    def bin_volumes(self, slices: np.ndarray) -> np.ndarray:
        """Shell (3D) or annulus (2D) volume of each bin in the current frame."""
        slices = np.asarray(slices, dtype=np.float64)
        r1 = self.max_distance * (slices / self.nslices)
        r2 = self.max_distance * ((slices + 1) / self.nslices)
        if self.use_3d:
            return shell_volume(r1, r2)
        return annulus_volume(r1, r2, self.height)

    def deposit(
        self,
        group: int,
        atom_indices: np.ndarray,
        positions: np.ndarray,
        weights: float | np.ndarray = 1.0,
    ) -> None:
        """
        Add atoms of one group to the profile.

        Parameters
        ----------
        group : int
            Group index in ``[0, ngroups)``.
        atom_indices : np.ndarray
            Indices of the group atoms in *positions*.
        positions : np.ndarray, shape (n_atoms, 3)
            Positions of every atom in the frame.
        weights : float or np.ndarray
            Per-atom mass, charge, electron count or 1.
        """
        self._check_deposit(group)
        atom_indices = np.atleast_1d(np.asarray(atom_indices, dtype=np.int64))
        weights = np.broadcast_to(np.asarray(weights, dtype=np.float64), atom_indices.shape)

        distance = self.distances(atom_indices, positions)
        slices = np.floor(distance / self.width)
        in_range = slices < self.nslices
        self._report_dropped(int(np.count_nonzero(~in_range)))

        slices = slices[in_range].astype(np.int64)
        np.add.at(self.bins[group], slices, weights[in_range] / self.bin_volumes(slices))

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
    def mean_max_distance(self) -> float:
        """Largest binned distance averaged over the frames seen so far."""
        if self.nframes == 0:
            return 0.0
        return self.max_distance_sum / self.nframes

    def slice_coordinates(self) -> np.ndarray:
        """Inner radius of each bin, using the mean bin width."""
        return np.arange(self.nslices) * (self.mean_max_distance / self.nslices)
