"""
Electron counts per atom name for electron-density profiles.

The table file lists how many electrons each atom name carries::

    2
    OW = 8
    HW1 = 1

The first line holds the number of entries to read. Lookups use a binary
search over the entries sorted by name (plain string ordering, i.e.
lexicographic by code point).
"""

from __future__ import annotations

import bisect
import logging
import os
import re
from collections.abc import Iterable, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_ENTRY_PATTERN = re.compile(r"^\s*(\S+?)\s*=\s*([+-]?\d+)")


class ElectronTableError(ValueError):
    """Raised when an electron table file is malformed."""
    pass


class ElectronTable:
    """
    Sorted mapping from atom name to electron count.

    Parameters
    ----------
    entries : iterable of (str, int)
        ``(name, electron_count)`` pairs in any order.

    Notes
    -----
    The entries are sorted once at construction. If a name appears more than
    once, the first occurrence in *entries* is the one returned by
    :meth:`lookup` (the sort is stable).
    """

    def __init__(self, entries: Iterable[tuple[str, int]]):
        ordered = sorted(((str(name), int(count)) for name, count in entries), key=lambda item: item[0])
        self._names = [name for name, _ in ordered]
        self._counts = [count for _, count in ordered]

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    @property
    def names(self) -> list[str]:
        """Atom names in lookup order."""
        return list(self._names)

    def lookup(self, name: str) -> int | None:
        """
        Return the electron count stored for *name*.

        Parameters
        ----------
        name : str
            Atom name.

        Returns
        -------
        int or None
            The electron count, or ``None`` if *name* is not in the table.
        """
        position = bisect.bisect_left(self._names, name)
        if position < len(self._names) and self._names[position] == name:
            return self._counts[position]
        return None


def read_electron_table(path: str | os.PathLike) -> ElectronTable:
    """
    Read an electron table file.

    Parameters
    ----------
    path : str or os.PathLike
        Path to the table file.

    Returns
    -------
    ElectronTable
        The sorted table.

    Raises
    ------
    OSError
        If the file cannot be opened.
    ElectronTableError
        If the count line is missing or invalid, or an entry line does not
        read ``<name> = <integer>``.
    """
    with open(path, "r") as handle:
        lines = handle.read().splitlines()

    # skip blank lines before the count
    cursor = 0
    while cursor < len(lines) and not lines[cursor].strip():
        cursor += 1
    if cursor == len(lines):
        raise ElectronTableError(f"Error reading from file {path}: the file is empty.")

    count_field = lines[cursor].split()[0]
    try:
        nentries = int(count_field)
    except ValueError:
        raise ElectronTableError(
            f"Invalid number of atom types in {path}: {lines[cursor].strip()!r}"
        ) from None
    if nentries < 0:
        raise ElectronTableError(f"Invalid number of atom types in {path}: {nentries}")

    entries = []
    body = lines[cursor + 1:]
    for i in range(nentries):
        if i >= len(body):
            raise ElectronTableError(
                f"{path} declares {nentries} atom types but only {len(body)} lines follow."
            )
        match = _ENTRY_PATTERN.match(body[i])
        if match is None:
            raise ElectronTableError(f"Invalid line in {path} at entry {i + 1}: {body[i]!r}")
        entries.append((match.group(1), int(match.group(2))))

    table = ElectronTable(entries)
    logger.info("Read %d atom types from %s", len(table), path)
    return table


def electron_weights(
    table: ElectronTable,
    names: Sequence[str],
    charges: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Per-atom electron counts corrected by partial charge.

    Parameters
    ----------
    table : ElectronTable
        Electron counts per atom name.
    names : sequence of str
        Atom names.
    charges : np.ndarray
        Partial charges, aligned with *names*.

    Returns
    -------
    weights : np.ndarray
        ``electrons - charge`` per atom, zero for names missing from the table.
    missing : np.ndarray of bool
        True where the name was not found.
    """
    charges = np.asarray(charges, dtype=np.float64)
    if len(names) != len(charges):
        raise ValueError("Atom names and charges are incommensurate.")

    weights = np.zeros(len(names), dtype=np.float64)
    missing = np.zeros(len(names), dtype=bool)
    for i, name in enumerate(names):
        electrons = table.lookup(name)
        if electrons is None:
            missing[i] = True
        else:
            weights[i] = electrons - charges[i]
    return weights, missing
