"""
Setup script for factorstats package.
"""

from setuptools import setup, find_packages

setup(
    name="factorstats",
    version="0.1.0",
    packages=find_packages(include=["factorstats", "factorstats.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Result models
        "pydantic>=2.0.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "tests": ["pytest>=6.0.0"],
    },
    entry_points={
        'console_scripts': [
            'factorstats=factorstats.__main__:main',
        ],
    },
    description="Correlation, covariance and anti-image matrices for factor analysis",
    keywords="factor analysis, correlation, covariance, anti-image, statistics",
    python_requires=">=3.8",
)
