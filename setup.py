#!/usr/bin/env python3
"""
respool Setup Script
====================
Allows installation of the respool package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # With the test tooling
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="respool",
    version="1.0.0",
    description="Pooled asyncio client for RESP key-value stores",
    packages=find_packages(include=["respool", "respool.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "respool=respool.client:main",
        ],
    },
)
