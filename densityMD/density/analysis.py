"""
DensityAnalysis: one pass over a trajectory feeding slab, grid and distance profiles.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence

import numpy as np
from tqdm import tqdm

from densityMD.cell import box_lengths, center_positions
from densityMD.density.constants import (
    AXIS_LABELS,
    DENSITY_LABELS,
    GRID_LEGENDS,
    validate_axis,
    validate_density_type,
)
from densityMD.density.distance_profile import DistanceProfile
from densityMD.density.height_grid import HeightGrid
from densityMD.density.selection import Group
from densityMD.density.slab_profile import SlabProfile, symmetrize as symmetrize_profile
from densityMD.density.writers import Sink, write_grid, write_profile
from densityMD.trajectories._base import DataUnavailableError, Trajectory

logger = logging.getLogger(__name__)


class DensityAnalysis:
    """
    Partial density profiles of atom groups over a trajectory.

    A slab profile along *axis* is always computed. A height grid on the
    plane normal to *axis* and a profile as a function of distance to a
    reference group are optional.

    Parameters
    ----------
    trajectory : Trajectory
        Trajectory object providing positions and cell matrices.
    groups : sequence of Group
        Groups to profile, each with its per-atom weights
        (see :func:`~densityMD.density.selection.build_groups`).
    density_type : {'mass', 'number', 'charge', 'electron'}
        Quantity carried by the group weights (default: 'mass').
    axis : int or {'X', 'Y', 'Z'}
        Profile axis, and normal of the grid and of 2D distances (default: 'Z').
    nslices : int or None
        Number of slices (and of grid rows and distance bins). ``None``
        takes ten slices per nm of the box along *axis* in frame 0.
    nslices2 : int or None
        Number of grid columns (default: *nslices*).
    symmetrize : bool
        Average the slab profile with its mirror image. Turns on *center*.
    center : bool
        Shift every frame so the centre of mass sits at the box centre in
        the plane and at zero along *axis*.
    grid : bool
        Compute the height grid.
    distance : bool
        Compute the distance profile; needs *reference*.
    reference : Group or array-like of int, optional
        Reference group for the distance profile.
    use_3d : bool
        Spherical shells (True) or cylindrical annuli around *axis* (False).
    use_com : bool
        Distances to the reference centre of mass instead of the nearest
        reference atom.

    Attributes
    ----------
    profile : np.ndarray or None
        Slab densities, shape ``(ngroups, nslices)``, after :meth:`run`.
    grids : np.ndarray or None
        Grid densities, shape ``(ngroups, nslices, nslices2)``.
    distance_profile : np.ndarray or None
        Distance densities, shape ``(ngroups, nslices)``.
    progress : {'initialized', 'computed'}
        Whether :meth:`run` has completed.
    """

    def __init__(
        self,
        trajectory: Trajectory,
        groups: Sequence[Group],
        density_type: str = 'mass',
        axis: int | str = 'Z',
        nslices: int | None = 50,
        nslices2: int | None = None,
        symmetrize: bool = False,
        center: bool = False,
        grid: bool = False,
        distance: bool = False,
        reference: Group | Sequence[int] | np.ndarray | None = None,
        use_3d: bool = True,
        use_com: bool = False,
    ):
        if len(groups) == 0:
            raise ValueError("At least one group is required.")

        self.trajectory = trajectory
        self.groups = list(groups)
        self.density_type = validate_density_type(density_type)
        self.axis = validate_axis(axis)
        self.symmetrize = bool(symmetrize)
        self.center = bool(center)

        if self.symmetrize and not self.center:
            warnings.warn(
                "Can not symmetrize without centering. Turning on -center",
                UserWarning,
                stacklevel=2,
            )
            self.center = True

        if nslices is None:
            nslices = self._default_nslices()
        self.nslices = int(nslices)
        self.nslices2 = self.nslices if nslices2 is None else int(nslices2)

        ngroups = len(self.groups)
        self.slab = SlabProfile(self.nslices, self.axis, ngroups, self.density_type)

        self.grid: HeightGrid | None = None
        if grid:
            self.grid = HeightGrid((self.nslices, self.nslices2), self.axis, ngroups, self.density_type)

        self.reference: Group | None = None
        self.distance: DistanceProfile | None = None
        if distance:
            if reference is None:
                raise ValueError("A distance profile needs a reference group.")
            self.reference = reference if isinstance(reference, Group) else Group('reference', reference)
            masses = trajectory.get_masses(self.reference.indices) if use_com else None
            self.distance = DistanceProfile(
                self.nslices,
                self.axis,
                ngroups,
                self.density_type,
                reference_indices=self.reference.indices,
                reference_masses=masses,
                use_3d=use_3d,
                use_com=use_com,
            )

        self._center_masses: np.ndarray | None = None
        if self.center:
            try:
                self._center_masses = trajectory.get_masses(np.arange(trajectory.n_atoms))
            except DataUnavailableError:
                warnings.warn(
                    "No masses available; centering on the geometric centre.",
                    UserWarning,
                    stacklevel=2,
                )

        self.profile: np.ndarray | None = None
        self.grids: np.ndarray | None = None
        self.distance_profile: np.ndarray | None = None
        self.frames_processed = 0
        self.progress = 'initialized'

    def _default_nslices(self) -> int:
        """Ten slices per nm of the box along the profile axis in frame 0."""
        if self.trajectory.frames == 0:
            raise ValueError("Can not choose a number of slices for an empty trajectory.")
        _, cell_matrix = self.trajectory.get_frame(0)
        nslices = int(box_lengths(cell_matrix)[self.axis] * 10)
        logger.info("Using %d slices", nslices)
        return nslices

    def _report_missing_electrons(self, group: Group) -> None:
        for name in group.missing_names:
            logger.warning("Could not find %s in the electron table; it carries no electrons.", name)

    def run(self, start: int = 0, stop: int | None = None, period: int = 1) -> None:
        """
        Accumulate all profiles over the selected frames and finalise them.

        Parameters
        ----------
        start : int
            First frame index (default: 0).
        stop : int or None
            Stop frame index (default: None for all frames).
        period : int
            Frame stride (default: 1).

        Raises
        ------
        RuntimeError
            If called a second time.
        NoFramesError
            If the bounds select no frames.
        """
        if self.progress == 'computed':
            raise RuntimeError("run() has already been called.")

        total = self.trajectory.n_frames_in(start, stop, period)
        for positions, cell_matrix in tqdm(
            self.trajectory.iter_frames(start, stop, period), total=total
        ):
            positions = np.asarray(positions, dtype=np.float64)
            if self.center:
                positions = center_positions(
                    positions, self._center_masses, box_lengths(cell_matrix), self.axis,
                )

            self.slab.start_frame(cell_matrix)
            if self.grid is not None:
                self.grid.start_frame(cell_matrix)
            if self.distance is not None:
                self.distance.start_frame(cell_matrix, positions)

            for g, group in enumerate(self.groups):
                self._report_missing_electrons(group)
                group_positions = positions[group.indices]
                self.slab.deposit(g, group_positions, group.weights)
                if self.grid is not None:
                    self.grid.deposit(g, group_positions, group.weights)
                if self.distance is not None:
                    self.distance.deposit(g, group.indices, positions, group.weights)

        self.frames_processed = self.slab.nframes
        logger.info("Read %d frames from trajectory", self.frames_processed)

        self.profile = self.slab.finalize()
        if self.symmetrize:
            self.profile = symmetrize_profile(self.profile)
        if self.grid is not None:
            self.grids = self.grid.finalize()
        if self.distance is not None:
            self.distance_profile = self.distance.finalize()
        self.progress = 'computed'

    def _require_computed(self) -> None:
        if self.progress != 'computed':
            raise RuntimeError("Call run() before writing results.")

    def write(
        self,
        output: Sink,
        grid_output: Sink | None = None,
        distance_output: Sink | None = None,
    ) -> None:
        """
        Write the computed profiles.

        Parameters
        ----------
        output : str, os.PathLike or text handle
            Destination of the slab profile (XVG).
        grid_output : str, os.PathLike or text handle, optional
            Destination of the height grid; requires ``grid=True``.
        distance_output : str, os.PathLike or text handle, optional
            Destination of the distance profile (XVG); requires ``distance=True``.
        """
        self._require_computed()
        legend = [group.name for group in self.groups]
        ylabel = DENSITY_LABELS[self.density_type]

        write_profile(
            output,
            self.slab.slice_coordinates(),
            self.profile,
            title="Partial densities",
            xlabel="Box (nm)",
            ylabel=ylabel,
            legend=legend,
        )
        logger.info("Wrote slab profile to %s", getattr(output, 'name', output))

        if grid_output is not None:
            if self.grid is None:
                raise ValueError("No height grid was computed.")
            labels = [AXIS_LABELS[a] for a in self.grid.axes[1:]]
            write_grid(grid_output, self.grids, self.grid.mean_widths, labels, GRID_LEGENDS[self.density_type])
            logger.info("Wrote height grid to %s", getattr(grid_output, 'name', grid_output))

        if distance_output is not None:
            if self.distance is None:
                raise ValueError("No distance profile was computed.")
            write_profile(
                distance_output,
                self.distance.slice_coordinates(),
                self.distance_profile,
                title="Density",
                xlabel=f"Distance from {self.reference.name} (nm)",
                ylabel=ylabel,
                legend=legend,
            )
            logger.info("Wrote distance profile to %s", getattr(distance_output, 'name', distance_output))


def compute_density_profiles(
    trajectory: Trajectory,
    groups: Sequence[Group],
    density_type: str = 'mass',
    axis: int | str = 'Z',
    nslices: int | None = 50,
    start: int = 0,
    stop: int | None = None,
    period: int = 1,
    **options,
) -> DensityAnalysis:
    """
    Compute density profiles from a trajectory with a single function call.

    Parameters
    ----------
    trajectory : Trajectory
        Trajectory object providing positions and cell matrices.
    groups : sequence of Group
        Groups to profile.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Type of density (default: 'mass').
    axis : int or {'X', 'Y', 'Z'}
        Profile axis (default: 'Z').
    nslices : int or None
        Number of slices (default: 50).
    start : int
        First frame index (default: 0).
    stop : int or None
        Stop frame index (default: None for all frames).
    period : int
        Frame stride (default: 1).
    **options
        Further :class:`DensityAnalysis` options (``grid``, ``distance``,
        ``reference``, ``symmetrize``, ...).

    Returns
    -------
    DensityAnalysis
        Analysis with computed results available as attributes.

    Examples
    --------
    >>> from densityMD.density import build_groups, compute_density_profiles
    >>> groups = build_groups(trajectory, ['OW', 'HW'], 'mass')
    >>> analysis = compute_density_profiles(trajectory, groups, axis='Z')
    >>> analysis.write('density.xvg')
    """
    analysis = DensityAnalysis(
        trajectory, groups, density_type=density_type, axis=axis, nslices=nslices, **options,
    )
    analysis.run(start=start, stop=stop, period=period)
    return analysis
