"""Constants for the density package."""

VALID_DENSITY_TYPES = ('mass', 'number', 'charge', 'electron')

AXIS_LABELS = 'XYZ'

#: y-axis label of a profile for each density kind.
DENSITY_LABELS = {
    'mass': 'Density (kg m\\S-3\\N)',
    'number': 'Number density (nm\\S-3\\N)',
    'charge': 'Charge density (e nm\\S-3\\N)',
    'electron': 'Electron density (e nm\\S-3\\N)',
}

#: Legend of a height grid for each density kind.
GRID_LEGENDS = {
    'mass': 'Partial mass density (kg/m^3)',
    'number': 'Partial number density (nm^-3)',
    'charge': 'Partial charge density (e nm^-3)',
    'electron': 'Partial electron density (e nm^-3)',
}


def validate_density_type(density_type: str) -> str:
    """Validate and normalise density_type.

    Parameters
    ----------
    density_type : str
        The density type to validate.

    Returns
    -------
    str
        The normalised density type (lowercase, stripped).

    Raises
    ------
    ValueError
        If density_type is not one of the valid types.
    """
    normalised = density_type.lower().strip()
    if normalised not in VALID_DENSITY_TYPES:
        raise ValueError(
            f"density_type must be one of {VALID_DENSITY_TYPES}, got {density_type!r}"
        )
    return normalised


def validate_axis(axis: int | str) -> int:
    """Validate an axis given as an index (0, 1, 2) or a label ('X', 'y', ...).

    Parameters
    ----------
    axis : int or str
        Axis index or label.

    Returns
    -------
    int
        The axis index.

    Raises
    ------
    ValueError
        If the axis does not name one of the three Cartesian axes.
    """
    if isinstance(axis, str):
        label = axis.upper().strip()
        if len(label) != 1 or label not in AXIS_LABELS:
            raise ValueError(f"Invalid axis {axis!r}. Must be one of X, Y or Z.")
        return AXIS_LABELS.index(label)
    if isinstance(axis, bool) or not 0 <= int(axis) < 3 or int(axis) != axis:
        raise ValueError(f"Invalid axis {axis!r}. Must be 0, 1 or 2.")
    return int(axis)


def in_plane_axes(normal_axis: int) -> tuple[int, int]:
    """Return the two axes orthogonal to *normal_axis*, in ascending order."""
    normal_axis = validate_axis(normal_axis)
    first, second = (a for a in range(3) if a != normal_axis)
    return first, second
