"""Shared fixtures for unit tests."""

import numpy as np
import pytest

from densityMD.trajectories import NumpyTrajectory


@pytest.fixture
def water_like_trajectory():
    """Two frames of four atoms in a 2 x 2 x 4 nm box.

    Atoms 0-2 form a water-like molecule, atom 3 is a lone carbon.
    """
    positions = np.array([
        [[1.0, 1.0, 0.5], [1.1, 1.0, 0.5], [0.9, 1.0, 0.5], [0.5, 0.5, 3.5]],
        [[1.0, 1.0, 1.5], [1.1, 1.0, 1.5], [0.9, 1.0, 1.5], [0.5, 0.5, 2.5]],
    ])
    return NumpyTrajectory(
        positions,
        2.0, 2.0, 4.0,
        species_list=["OW", "HW", "HW", "C"],
        mass_list=np.array([16.0, 1.0, 1.0, 12.0]),
        charge_list=np.array([-0.8, 0.4, 0.4, 0.0]),
    )


@pytest.fixture
def bare_trajectory():
    """A single frame with positions only (no names, masses or charges)."""
    positions = np.array([[[0.25, 0.25, 0.25], [0.75, 0.75, 0.75]]])
    return NumpyTrajectory(positions, cell_matrix=np.eye(3))
