#!/usr/bin/env python3
"""Setup script for imposter-relay package."""

from setuptools import setup, find_packages

setup(
    name="imposter-relay",
    version="0.1.0",
    description="Run a social deduction party round from a single shared device",
    packages=find_packages(where=".", include=["relay*"]),
    package_dir={"": "."},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
