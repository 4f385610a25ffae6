#!/usr/bin/env python3
"""
HTCache Setup Script
====================
Allows installation of the htcache package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="htcache",
    version="0.1.0",
    description="Simple and fast cache with HTTP interface",
    packages=find_packages(include=["htcache", "htcache.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.100",
        "starlette",
        "uvicorn>=0.23",
        "structlog>=23.1",
        "httpx>=0.24",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "htcache=htcache.server:main",
        ],
    },
)
