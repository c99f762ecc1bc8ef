"""Tests for densityMD.density.selection."""

import numpy as np
import pytest

from densityMD.density import Group, build_groups
from densityMD.density.selection import resolve_indices
from densityMD.electron_table import ElectronTable
from densityMD.trajectories import DataUnavailableError


class TestGroup:
    """Tests for the Group container."""

    def test_weights_broadcast_and_read_only(self):
        group = Group("SOL", [2, 0, 1], 1.0)
        np.testing.assert_array_equal(group.indices, [2, 0, 1])
        np.testing.assert_array_equal(group.weights, [1.0, 1.0, 1.0])
        assert len(group) == 3
        with pytest.raises(ValueError):
            group.indices[0] = 5

    def test_missing_names(self):
        group = Group("g", [0, 1], [8.0, 0.0], atom_names=["OW", "XX"], missing=[False, True])
        assert group.missing_names == ["XX"]

    def test_incommensurate_missing_mask_raises(self):
        with pytest.raises(ValueError, match="incommensurate"):
            Group("g", [0, 1], missing=[True])


class TestResolveIndices:
    """Tests for resolve_indices()."""

    def test_selection_string(self, water_like_trajectory):
        np.testing.assert_array_equal(resolve_indices(water_like_trajectory, "HW"), [1, 2])

    def test_index_group_takes_precedence(self, water_like_trajectory):
        index_groups = {"HW": np.array([3])}
        np.testing.assert_array_equal(resolve_indices(water_like_trajectory, "HW", index_groups), [3])

    def test_explicit_indices(self, water_like_trajectory):
        np.testing.assert_array_equal(resolve_indices(water_like_trajectory, [3, 0]), [3, 0])

    def test_empty_selection_raises(self, water_like_trajectory):
        with pytest.raises(ValueError, match="does not contain any atoms"):
            resolve_indices(water_like_trajectory, [])

    def test_out_of_range_raises(self, water_like_trajectory):
        with pytest.raises(ValueError, match="outside the trajectory"):
            resolve_indices(water_like_trajectory, [4])


class TestBuildGroups:
    """Tests for build_groups() weights per density type."""

    def test_mass_weights(self, water_like_trajectory):
        (group,) = build_groups(water_like_trajectory, ["OW"], "mass")
        assert group.name == "OW"
        np.testing.assert_array_equal(group.weights, [16.0])

    def test_number_weights(self, bare_trajectory):
        (group,) = build_groups(bare_trajectory, [[0, 1]], "number")
        assert group.name == "group0"
        np.testing.assert_array_equal(group.weights, [1.0, 1.0])

    def test_charge_weights(self, water_like_trajectory):
        (group,) = build_groups(water_like_trajectory, ["HW"], "charge", names=["hydrogens"])
        assert group.name == "hydrogens"
        np.testing.assert_allclose(group.weights, [0.4, 0.4])

    def test_electron_weights(self, water_like_trajectory):
        table = ElectronTable([("OW", 8), ("HW", 1)])
        groups = build_groups(water_like_trajectory, [[0, 1, 2, 3]], "electron", table)
        np.testing.assert_allclose(groups[0].weights, [8.8, 0.6, 0.6, 0.0])
        assert groups[0].missing_names == ["C"]

    def test_electron_density_needs_table(self, water_like_trajectory):
        with pytest.raises(ValueError, match="electron table"):
            build_groups(water_like_trajectory, ["OW"], "electron")

    def test_missing_data_raises(self, bare_trajectory):
        with pytest.raises(DataUnavailableError):
            build_groups(bare_trajectory, [[0]], "mass")

    def test_no_groups_raises(self, water_like_trajectory):
        with pytest.raises(ValueError, match="At least one group"):
            build_groups(water_like_trajectory, [], "mass")

    def test_group_order_is_preserved(self, water_like_trajectory):
        groups = build_groups(water_like_trajectory, ["C", "OW", "HW"], "number")
        assert [g.name for g in groups] == ["C", "OW", "HW"]
