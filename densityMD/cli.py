"""
CLI for densityMD.

- Partial density profiles along a box axis
- Height grids on the plane normal to that axis
- Density as a function of distance to a reference group
"""

from __future__ import annotations

from typing import Optional, Sequence
import argparse
import contextlib
import logging

from densityMD.density import DensityAnalysis, build_groups
from densityMD.density.constants import VALID_DENSITY_TYPES
from densityMD.electron_table import read_electron_table
from densityMD.trajectories import DataUnavailableError, MDATrajectory, read_index_file
from densityMD.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None):
    p = argparse.ArgumentParser(
        prog="densitymd",
        description="Compute partial densities across a box, optionally as a height grid "
                    "or as a function of distance to a reference group.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # -------------------------------------------------------------------------
    # Input / output
    # -------------------------------------------------------------------------
    p.add_argument("-f", dest="trajectory", required=True, help="Trajectory file (xtc, trr, dcd, ...)")
    p.add_argument("-s", dest="topology", required=True, help="Topology file (tpr, gro, pdb, ...)")
    p.add_argument("-n", dest="index", default=None, help="GROMACS index file with the groups")
    p.add_argument("-ei", dest="electrons", default=None,
                   help="Electron table, required with -dens electron")
    p.add_argument("-o", dest="output", default="density.xvg", help="Slab profile output (xvg)")
    p.add_argument("-og", dest="grid_output", default=None,
                   help="Height grid output; enables the grid")
    p.add_argument("-od", dest="distance_output", default=None,
                   help="Distance profile output (xvg); enables distance mode, needs -ref")

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------
    p.add_argument("-groups", nargs="+", required=True,
                   help="Index group names, or MDAnalysis selections when no index file is given")
    p.add_argument("-ng", type=int, default=None, help="Number of groups (checked against -groups)")
    p.add_argument("-ref", default=None, help="Reference group for distance mode")

    # -------------------------------------------------------------------------
    # Binning
    # -------------------------------------------------------------------------
    p.add_argument("-d", dest="axis", default="Z", choices=["X", "Y", "Z", "x", "y", "z"],
                   help="Profile axis; normal of the grid and of 2D distances")
    p.add_argument("-sl", dest="nslices", type=int, default=50,
                   help="Number of slices (and grid rows, and distance bins); 0 takes 10 per nm of box")
    p.add_argument("-sl2", dest="nslices2", type=int, default=None,
                   help="Number of grid columns; 0 or less uses -sl")
    p.add_argument("-dens", dest="density_type", default="mass", choices=VALID_DENSITY_TYPES,
                   help="Density kind")
    p.add_argument("-symm", action="store_true", help="Symmetrize the profile around the centre (implies -center)")
    p.add_argument("-center", action="store_true", help="Centre the system on its centre of mass every frame")
    p.add_argument("-whole", action="store_true", help="Make molecules whole before binning (needs bonds)")
    p.add_argument("-3d", dest="use_3d", action="store_true", default=True,
                   help="Distances in 3D spherical shells (default)")
    p.add_argument("-no3d", "-no-3d", dest="use_3d", action="store_false",
                   help="Distances in the plane normal to -d, binned in cylindrical annuli")
    p.add_argument("-com", action="store_true",
                   help="Distances to the reference centre of mass instead of the nearest reference atom")

    # -------------------------------------------------------------------------
    # Frames
    # -------------------------------------------------------------------------
    p.add_argument("-b", dest="start", type=int, default=0, help="First frame index")
    p.add_argument("-e", dest="stop", type=int, default=None, help="Stop before this frame index")
    p.add_argument("-dt", dest="period", type=int, default=1, help="Use every n-th frame")

    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def run(args: argparse.Namespace) -> None:
    """Set up the analysis from parsed arguments, run it and write the outputs."""
    if args.density_type == "electron" and args.electrons is None:
        raise ValueError("Electron density needs an electron table (-ei).")
    if args.distance_output is not None and args.ref is None:
        raise ValueError("Distance mode (-od) needs a reference group (-ref).")
    if args.ng is not None and args.ng != len(args.groups):
        raise ValueError(f"-ng {args.ng} does not match the {len(args.groups)} groups given.")

    electron_table = read_electron_table(args.electrons) if args.density_type == "electron" else None
    index_groups = read_index_file(args.index) if args.index else None

    trajectory = MDATrajectory(args.trajectory, args.topology, unwrap=args.whole)
    groups = build_groups(trajectory, args.groups, args.density_type, electron_table, index_groups)
    reference = None
    if args.ref is not None:
        reference = build_groups(trajectory, [args.ref], "number", index_groups=index_groups)[0]

    # outputs are opened before the first frame so a bad path fails early
    with contextlib.ExitStack() as stack:
        output = stack.enter_context(open(args.output, "w"))
        grid_output = None
        if args.grid_output is not None:
            grid_output = stack.enter_context(open(args.grid_output, "w"))
        distance_output = None
        if args.distance_output is not None:
            distance_output = stack.enter_context(open(args.distance_output, "w"))

        analysis = DensityAnalysis(
            trajectory,
            groups,
            density_type=args.density_type,
            axis=args.axis,
            nslices=args.nslices if args.nslices > 0 else None,
            nslices2=args.nslices2 if args.nslices2 is not None and args.nslices2 > 0 else None,
            symmetrize=args.symm,
            center=args.center,
            grid=grid_output is not None,
            distance=distance_output is not None,
            reference=reference,
            use_3d=args.use_3d,
            use_com=args.com,
        )
        analysis.run(start=args.start, stop=args.stop, period=args.period)
        analysis.write(output, grid_output, distance_output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.captureWarnings(True)
    try:
        run(args)
    except (ValueError, OSError, RuntimeError, DataUnavailableError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
