"""
Unit conversion utilities for densityMD.

Accumulators work in trajectory units: positions in nm, masses in atomic
mass units and charges in units of the elementary charge. Only mass
densities are converted on output, from amu/nm^3 to kg/m^3.

Notes
-----
- Uses values from :mod:`scipy.constants`.
"""

import scipy.constants as constants

#: Multiply a density in amu/nm^3 by this factor to obtain kg/m^3.
AMU_PER_NM3_TO_KG_PER_M3: float = constants.atomic_mass / constants.nano ** 3


def density_conversion_factor(density_type: str) -> float:
    """
    Return the factor converting an accumulated density to output units.

    Parameters
    ----------
    density_type : str
        The density kind. Supported values are:

        - ``'mass'`` : amu/nm^3 -> kg/m^3
        - ``'number'`` : nm^-3, unchanged (returns 1.0)
        - ``'charge'`` : e nm^-3, unchanged (returns 1.0)
        - ``'electron'`` : e nm^-3, unchanged (returns 1.0)

    Returns
    -------
    float
        Conversion factor for the requested density kind.

    Raises
    ------
    ValueError
        If the density kind is not recognized.

    Examples
    --------
    >>> from densityMD.utils import density_conversion_factor
    >>> round(density_conversion_factor('mass'), 4)
    1.6605
    >>> density_conversion_factor('number')
    1.0
    """
    density_type = density_type.lower().strip()

    if density_type == "mass":
        return AMU_PER_NM3_TO_KG_PER_M3
    elif density_type in ("number", "charge", "electron"):
        return 1.0
    else:
        raise ValueError(
            f"Unsupported density type: '{density_type}'. "
            "Expected one of ['mass', 'number', 'charge', 'electron']."
        )
