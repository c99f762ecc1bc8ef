"""Reader for GROMACS index (``.ndx``) files."""

import logging
import re

import numpy as np

logger = logging.getLogger(__name__)

_HEADER_PATTERN = re.compile(r"^\s*\[\s*(.+?)\s*\]\s*$")


def read_index_file(path: str) -> dict[str, np.ndarray]:
    """
    Read the atom groups of a GROMACS index file.

    Parameters
    ----------
    path : str
        Path to the ``.ndx`` file.

    Returns
    -------
    dict of str to np.ndarray
        Group name to 0-based atom indices, in file order. A name repeated
        in the file keeps its first definition.

    Raises
    ------
    OSError
        If the file can not be read.
    ValueError
        If atom ids appear before the first group header, or an id is not a
        positive integer.
    """
    groups: dict[str, list[int]] = {}
    current: list[int] | None = None

    with open(path) as handle:
        for lineno, line in enumerate(handle, start=1):
            line = line.split(';', 1)[0].strip()
            if not line:
                continue
            header = _HEADER_PATTERN.match(line)
            if header:
                name = header.group(1)
                if name in groups:
                    logger.warning("Group %s is defined twice in %s; keeping the first.", name, path)
                    current = []
                else:
                    current = groups.setdefault(name, [])
                continue
            if current is None:
                raise ValueError(f"Atom ids before the first group header in {path} (line {lineno}).")
            try:
                ids = [int(token) for token in line.split()]
            except ValueError:
                raise ValueError(f"Invalid atom id in {path} (line {lineno}): {line!r}")
            if any(i <= 0 for i in ids):
                raise ValueError(f"Invalid atom id in {path} (line {lineno}): ids start at 1.")
            current.extend(ids)

    logger.info("Read %d index groups from %s", len(groups), path)
    return {name: np.asarray(ids, dtype=np.int64) - 1 for name, ids in groups.items()}
