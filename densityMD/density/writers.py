"""
Text output for density profiles and height grids.

Profiles are written as XVG tables (a ``#``/``@`` header followed by one row
per bin: the bin coordinate, then one value per group). Height grids use a
block format: ``@`` header lines with the mean cell widths and axis labels,
then per group ``rows`` lines of ``cols`` tab-separated values closed by a
literal ``&&`` line.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator, Sequence
from typing import IO

import numpy as np

from densityMD.version import __version__

Sink = str | os.PathLike | IO[str]


@contextlib.contextmanager
def open_sink(sink: Sink) -> Iterator[IO[str]]:
    """Yield a writable text handle; paths are opened (and closed) here."""
    if hasattr(sink, "write"):
        yield sink
    else:
        with open(sink, "w") as handle:
            yield handle


def write_profile(
    sink: Sink,
    coordinates: np.ndarray,
    values: np.ndarray,
    *,
    title: str,
    xlabel: str,
    ylabel: str,
    legend: Sequence[str] = (),
    fmt: str = "%12g",
) -> None:
    """
    Write a profile as an XVG table.

    Parameters
    ----------
    sink : str, os.PathLike or text handle
        Output file path or open handle (handles are not closed).
    coordinates : np.ndarray, shape (nslices,)
        Bin coordinate of each row.
    values : np.ndarray, shape (ngroups, nslices)
        One profile per group.
    title, xlabel, ylabel : str
        Plot annotations.
    legend : sequence of str
        Group names, one per profile.
    fmt : str
        printf-style format of every number.
    """
    values = np.atleast_2d(np.asarray(values, dtype=np.float64))
    coordinates = np.asarray(coordinates, dtype=np.float64)
    if values.shape[1] != coordinates.shape[0]:
        raise ValueError("Profile values and coordinates are incommensurate.")

    with open_sink(sink) as handle:
        handle.write(f"# This file was created by densityMD {__version__}\n")
        handle.write(f'@    title "{title}"\n')
        handle.write(f'@    xaxis  label "{xlabel}"\n')
        handle.write(f'@    yaxis  label "{ylabel}"\n')
        handle.write("@TYPE xy\n")
        for i, name in enumerate(legend):
            handle.write(f'@ s{i} legend "{name}"\n')
        for row, x in enumerate(coordinates):
            fields = [fmt % x] + [fmt % v for v in values[:, row]]
            handle.write("\t".join(fields) + "\n")


def write_grid(
    sink: Sink,
    grids: np.ndarray,
    mean_widths: Sequence[float],
    axis_labels: Sequence[str],
    legend: str,
    fmt: str = "%7.3f",
) -> None:
    """
    Write height grids in the block format.

    Parameters
    ----------
    sink : str, os.PathLike or text handle
        Output file path or open handle (handles are not closed).
    grids : np.ndarray, shape (ngroups, rows, cols)
        One grid per group.
    mean_widths : sequence of float
        Mean cell width along the first and second in-plane axis.
    axis_labels : sequence of str
        Labels of the first and second in-plane axis (e.g. ``('X', 'Y')``).
    legend : str
        Description of the plotted quantity.
    fmt : str
        printf-style format of every number.
    """
    grids = np.asarray(grids, dtype=np.float64)
    if grids.ndim != 3:
        raise ValueError(f"Grids must have shape (ngroups, rows, cols), got {grids.shape}.")

    with open_sink(sink) as handle:
        handle.write(f"@xwidth {mean_widths[0]:7.3f}\n")
        handle.write(f"@ywidth {mean_widths[1]:7.3f}\n")
        handle.write(f"@xlabel {axis_labels[0]} (nm)\n")
        handle.write(f"@ylabel {axis_labels[1]} (nm)\n")
        handle.write(f"@legend {legend}\n")
        for grid in grids:
            for row in grid:
                handle.write("\t".join(fmt % v for v in row) + "\n")
            handle.write("&&\n")
