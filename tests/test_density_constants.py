"""Tests for densityMD.density.constants module."""

import pytest

from densityMD.density.constants import (
    DENSITY_LABELS,
    GRID_LEGENDS,
    VALID_DENSITY_TYPES,
    in_plane_axes,
    validate_axis,
    validate_density_type,
)


class TestValidateDensityType:
    """Tests for validate_density_type function."""

    def test_valid_types_accepted(self):
        """All valid density types should be accepted."""
        for density_type in VALID_DENSITY_TYPES:
            assert validate_density_type(density_type) == density_type

    def test_invalid_type_raises(self):
        with pytest.raises(ValueError, match="density_type must be one of"):
            validate_density_type("polarisation")

    def test_normalises_case_and_whitespace(self):
        assert validate_density_type(" Electron\n") == "electron"

    def test_error_message_shows_original_value(self):
        """Error message should show the original (unnormalised) value."""
        with pytest.raises(ValueError, match="'INVALID'"):
            validate_density_type("INVALID")

    def test_every_type_has_labels(self):
        assert set(DENSITY_LABELS) == set(VALID_DENSITY_TYPES)
        assert set(GRID_LEGENDS) == set(VALID_DENSITY_TYPES)


class TestValidateAxis:
    """Tests for validate_axis and in_plane_axes."""

    @pytest.mark.parametrize("axis, expected", [
        ("X", 0), ("y", 1), ("Z", 2), (" z ", 2), (0, 0), (1, 1), (2, 2),
    ])
    def test_accepts_labels_and_indices(self, axis, expected):
        assert validate_axis(axis) == expected

    @pytest.mark.parametrize("axis", ["W", "XY", ""])
    def test_rejects_bad_labels(self, axis):
        with pytest.raises(ValueError, match="Must be one of X, Y or Z"):
            validate_axis(axis)

    @pytest.mark.parametrize("axis", [3, -1, True])
    def test_rejects_bad_indices(self, axis):
        with pytest.raises(ValueError, match="Must be 0, 1 or 2"):
            validate_axis(axis)

    @pytest.mark.parametrize("normal, expected", [(0, (1, 2)), (1, (0, 2)), (2, (0, 1)), ("Y", (0, 2))])
    def test_in_plane_axes_ascending(self, normal, expected):
        assert in_plane_axes(normal) == expected
