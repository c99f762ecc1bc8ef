"""
Kernel selection for densityMD.

The nearest-reference distance search is the only hot loop in a density
run. It has a numba implementation (``'numba'``, the default) and a chunked
NumPy broadcast (``'numpy'``). The choice is read once, at import, from the
``DENSITYMD_BACKEND`` environment variable::

    DENSITYMD_BACKEND=numpy densitymd -f traj.xtc -s topol.tpr ...

Changing the variable after ``densityMD`` has been imported has no effect.
"""

from __future__ import annotations

import os

BACKEND_ENV_VAR = 'DENSITYMD_BACKEND'
AVAILABLE_BACKENDS = frozenset({'numpy', 'numba'})
DEFAULT_BACKEND = 'numba'


def _backend_from_environment(environ=os.environ) -> str:
    """Read the backend name from *environ*; blank or unset means the default.

    Raises
    ------
    ValueError
        If the variable names a backend that does not exist.
    """
    requested = environ.get(BACKEND_ENV_VAR, '').strip().lower()
    if not requested:
        return DEFAULT_BACKEND
    if requested in AVAILABLE_BACKENDS:
        return requested
    choices = ', '.join(sorted(AVAILABLE_BACKENDS))
    raise ValueError(f"Invalid {BACKEND_ENV_VAR} '{requested}'. Must be one of: {choices}")


BACKEND = _backend_from_environment()


def get_backend() -> str:
    """Name of the distance kernel chosen at import ('numpy' or 'numba')."""
    return BACKEND
