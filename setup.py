"""Setup script for the MonScreener API server."""

import os
import re
from setuptools import setup, find_packages

# Get description from README
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Get version from package
with open(os.path.join("monscreener", "__init__.py"), "r", encoding="utf-8") as f:
    init_source = f.read()
version = re.search(r'^__version__ = "([^"]+)"', init_source, re.MULTILINE).group(1)
author = re.search(r'^__author__ = "([^"]+)"', init_source, re.MULTILINE).group(1)

# Get dependencies from requirements.txt
with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = [
        line.strip() for line in f.readlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="monscreener",
    version=version,
    description="Monad token discovery, market data and wallet lookups over JSON-RPC and DEXScreener",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author=author,
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Framework :: FastAPI",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "monscreener=monscreener.__main__:main",
        ],
    },
)
