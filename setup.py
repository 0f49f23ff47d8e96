#!/usr/bin/env python3
"""Release Linker CLI - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = f.read().splitlines()

setup(
    name="ssh-release-linker",
    version="1.0.0",
    description="Safe SSH deployments: versioned releases, symlink cutover and post-deploy commands",
    author="Release Linker Team",
    packages=find_packages(include=["release_linker", "release_linker.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "release-linker=release_linker.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
