"""
Setup script for adaptmat

Pure-Python package laid out under src/:
1. src/adaptmat is the only installed package
2. numpy is the single hard runtime dependency
3. scipy interop and the test suite are optional extras
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/adaptmat/__init__.py
def get_version():
    version_file = Path("src/adaptmat/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="adaptmat",
    version=get_version(),
    description="Adaptive dense / CSR sparse matrices with automatic backend selection",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "scipy": ["scipy>=1.7"],
        "test": ["pytest>=7.0", "scipy>=1.7"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    zip_safe=True,
)
