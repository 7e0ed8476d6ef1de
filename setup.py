#!/usr/bin/env python3
"""
Setup script for mongoconf package.
"""

from setuptools import setup, find_packages

setup(
    name="mongoconf",
    version="0.3.0",
    description="Layered configuration resolution for the MongoDB Spark connector",
    author="mongoconf Team",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "typer>=0.9",
        "rich>=13.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "mongoconf=mongoconf.cli.main:main",
        ],
    },
)
