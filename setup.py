#!/usr/bin/env python3
"""
Setup script for pycath
"""

from setuptools import setup, find_packages

setup(
    name="pycath",
    version="0.1.0",
    description="Split macromolecular structures into CATH domains",
    packages=find_packages(include=["cath", "cath.*"]),
    install_requires=[
        "pyyaml>=6.0",
        "numpy>=1.22.0",
        "requests>=2.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'cath=cath.cli.main:main',
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
)
