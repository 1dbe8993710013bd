import pathlib
import sys

from setuptools import find_packages, setup


__author__ = "The phylolayout developers"
__copyright__ = "Copyright 2026, The phylolayout developers"
__license__ = "BSD-3"
__version__ = "2026.10.17a"
__status__ = "Alpha"

# Check Python version, no point installing if unsupported version inplace
min_version = (3, 10)
if sys.version_info < min_version:
    py_version = ".".join(str(n) for n in sys.version_info)
    msg = (
        f"Python-{'.'.join(map(str, min_version))} or greater is required, "
        f"Python-{py_version} used."
    )
    raise RuntimeError(msg)


short_description = "Pixel layout of cladograms and tanglegrams"

root = pathlib.Path(__file__).parent

long_description = (root / "README.md").read_text()

PACKAGE_DIR = "src"

setup(
    name="phylolayout",
    version=__version__,
    description=short_description,
    long_description=long_description,
    long_description_content_type="text/markdown",
    platforms=["any"],
    license=__license__,
    keywords=[
        "biology",
        "phylogeny",
        "evolution",
        "bioinformatics",
        "cladogram",
        "tanglegram",
    ],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: BSD License",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": PACKAGE_DIR},
    install_requires=[
        "numpy",
        "scitrack",
    ],
    extras_require={
        "test": [
            "nox",
            "pytest",
            "pytest-cov",
        ],
        "dev": [
            "black",
            "isort",
            "nox",
            "pytest",
            "pytest-cov",
        ],
    },
)
