#! /usr/bin/env python
"""
setup.py for densitymd
"""

# System imports
import io
from os import path
from setuptools import setup, find_packages
from densityMD.version import __version__

PACKAGES = find_packages(exclude=['tests*'])

# versioning

ISRELEASED = False
VERSION = __version__


THIS_DIRECTORY = path.abspath(path.dirname(__file__))
with io.open(path.join(THIS_DIRECTORY, 'README.md')) as f:
    LONG_DESCRIPTION = f.read()

INFO = {
        'name': 'densitymd',
        'description': 'Partial density profiles, height grids and distance '
                       'profiles from molecular dynamics trajectories.',
        'packages': PACKAGES,
        'include_package_data': True,
        'python_requires': '>=3.10',
        'install_requires': ['numpy', 'scipy>=1.9.3', 'tqdm',
                             'MDAnalysis>=2.4.2', 'numba'],
        'extras_require': {'test': ['pytest']},
        'entry_points': {
            'console_scripts': ['densitymd = densityMD.cli:main'],
        },
        'version': VERSION,
        'license': 'MIT',
        'long_description': LONG_DESCRIPTION,
        'long_description_content_type': 'text/markdown',
        'classifiers': ['Development Status :: 4 - Beta',
                        'Intended Audience :: Science/Research',
                        'License :: OSI Approved :: MIT License',
                        'Natural Language :: English',
                        'Operating System :: OS Independent',
                        'Programming Language :: Python :: 3.10',
                        'Topic :: Scientific/Engineering',
                        'Topic :: Scientific/Engineering :: Chemistry',
                        'Topic :: Scientific/Engineering :: Physics']
        }

####################################################################
# this is where setup starts
####################################################################


def setup_package():
    """
    Runs package setup
    """
    setup(**INFO)


if __name__ == '__main__':
    setup_package()
