"""Group class for atom groups and their per-atom deposit weights."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np

from densityMD.density.constants import validate_density_type
from densityMD.electron_table import ElectronTable, electron_weights
from densityMD.trajectories._base import Trajectory


class Group:
    """
    An ordered, immutable set of atoms and the weight each one deposits.

    Parameters
    ----------
    name : str
        Group name used in output legends.
    indices : array-like of int
        0-based atom indices.
    weights : float or array-like, optional
        Per-atom weight (mass, 1, charge, or electron count), broadcast to
        the number of atoms (default: 1.0).
    atom_names : sequence of str, optional
        Atom names, used to report atoms missing from an electron table.
    missing : array-like of bool, optional
        True for atoms whose electron count was not found.

    Attributes
    ----------
    missing_names : list of str
        Names of the atoms flagged in *missing*, one entry per atom.
    """

    def __init__(
        self,
        name: str,
        indices: np.ndarray | Sequence[int],
        weights: float | np.ndarray = 1.0,
        atom_names: Sequence[str] | None = None,
        missing: np.ndarray | None = None,
    ):
        self.name = name
        self.indices = np.array(indices, dtype=np.int64).ravel()
        self.indices.setflags(write=False)
        self.weights = np.array(
            np.broadcast_to(np.asarray(weights, dtype=np.float64), self.indices.shape)
        )
        self.weights.setflags(write=False)

        if missing is None:
            self.missing = np.zeros(self.indices.shape, dtype=bool)
        else:
            self.missing = np.asarray(missing, dtype=bool)
            if self.missing.shape != self.indices.shape:
                raise ValueError("Missing-atom mask and group indices are incommensurate.")

        if atom_names is not None and len(atom_names) == len(self.indices):
            self.missing_names = [str(n) for n, m in zip(atom_names, self.missing) if m]
        else:
            self.missing_names = [str(i) for i in self.indices[self.missing]]

    def __len__(self) -> int:
        return len(self.indices)

    def __repr__(self) -> str:
        return f"Group({self.name!r}, natoms={len(self)})"


def resolve_indices(
    trajectory: Trajectory,
    selection: str | Sequence[int] | np.ndarray,
    index_groups: Mapping[str, np.ndarray] | None = None,
) -> np.ndarray:
    """
    Resolve a group name, selection string or index list to atom indices.

    Parameters
    ----------
    trajectory : Trajectory
        Trajectory used to resolve selection strings.
    selection : str or array-like of int
        Index-file group name, trajectory selection, or explicit indices.
    index_groups : mapping, optional
        Groups read from an index file; names found here take precedence.

    Returns
    -------
    np.ndarray
        0-based atom indices.

    Raises
    ------
    ValueError
        If the selection is empty or an index is out of range.
    """
    if isinstance(selection, str):
        if index_groups is not None and selection in index_groups:
            indices = np.asarray(index_groups[selection], dtype=np.int64)
        else:
            indices = np.asarray(trajectory.get_indices(selection), dtype=np.int64)
    else:
        indices = np.asarray(selection, dtype=np.int64).ravel()

    if len(indices) == 0:
        raise ValueError(f"Selection {selection!r} does not contain any atoms.")
    if indices.min() < 0 or indices.max() >= trajectory.n_atoms:
        raise ValueError(
            f"Selection {selection!r} refers to atoms outside the trajectory "
            f"({trajectory.n_atoms} atoms)."
        )
    return indices


def build_group(
    trajectory: Trajectory,
    name: str,
    indices: np.ndarray,
    density_type: str,
    electron_table: ElectronTable | None = None,
) -> Group:
    """
    Build a group with the weights required by *density_type*.

    Parameters
    ----------
    trajectory : Trajectory
        Trajectory providing masses, charges and atom names.
    name : str
        Group name.
    indices : np.ndarray
        0-based atom indices.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Type of density. Data requirements:
        - 'mass': Trajectory must provide masses
        - 'number': No data required
        - 'charge': Trajectory must provide charges
        - 'electron': Trajectory must provide names and charges, and an
          electron table is required

    Returns
    -------
    Group
        The weighted group.
    """
    density_type = validate_density_type(density_type)

    match density_type:
        case 'mass':
            return Group(name, indices, trajectory.get_masses(indices))

        case 'number':
            return Group(name, indices, 1.0)

        case 'charge':
            return Group(name, indices, trajectory.get_charges(indices))

        case 'electron':
            if electron_table is None:
                raise ValueError("Electron densities need an electron table.")
            names = list(trajectory.get_names(indices))
            weights, missing = electron_weights(electron_table, names, trajectory.get_charges(indices))
            return Group(name, indices, weights, atom_names=names, missing=missing)

        case _:
            raise ValueError(f"Unknown density_type: {density_type!r}")


def build_groups(
    trajectory: Trajectory,
    selections: Sequence[str | Sequence[int] | np.ndarray],
    density_type: str,
    electron_table: ElectronTable | None = None,
    index_groups: Mapping[str, np.ndarray] | None = None,
    names: Sequence[str] | None = None,
) -> list[Group]:
    """
    Resolve and weight a list of groups.

    Parameters
    ----------
    trajectory : Trajectory
        Trajectory providing indices, masses, charges and atom names.
    selections : sequence
        Index-file group names, trajectory selections, or index arrays.
    density_type : {'mass', 'number', 'charge', 'electron'}
        Type of density.
    electron_table : ElectronTable, optional
        Required for electron densities.
    index_groups : mapping, optional
        Groups read from an index file.
    names : sequence of str, optional
        Legend names; defaults to the selection strings (or ``group<i>``).

    Returns
    -------
    list of Group
    """
    if len(selections) == 0:
        raise ValueError("At least one group is required.")
    if names is not None and len(names) != len(selections):
        raise ValueError("Group names and selections are incommensurate.")

    groups = []
    for i, selection in enumerate(selections):
        if names is not None:
            name = names[i]
        else:
            name = selection if isinstance(selection, str) else f"group{i}"
        indices = resolve_indices(trajectory, selection, index_groups)
        groups.append(build_group(trajectory, name, indices, density_type, electron_table))
    return groups
