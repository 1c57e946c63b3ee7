#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup script for AgriChain

Installs the ``agrichain`` package with its EUDR compliance engine.
"""

from pathlib import Path

from setuptools import find_packages, setup

VERSION = "1.0.0"

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")
else:
    long_description = "AgriChain EUDR compliance engine for supply-chain traceability"

setup(
    name="agrichain",
    version=VERSION,
    description="EUDR geolocation validation and due diligence statement engine",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    python_requires=">=3.9",
    packages=find_packages(include=["agrichain", "agrichain.*"]),
    install_requires=[
        "pydantic>=2.0",
        "prometheus-client>=0.17",
        "shapely>=2.0",
        "pyproj>=3.4",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Scientific/Engineering :: GIS",
    ],
)
