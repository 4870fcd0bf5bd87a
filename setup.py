#!/usr/bin/env python3
import setuptools

setuptools.setup(
    name="gofmt-pipe",
    version="0.1.0",
    packages=["gofmt_pipe"],
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "gofmt-pipe = gofmt_pipe.cli:main",
        ],
    },
    author="",
    description="Pipe Go sources through golines and goimports, then list, write, diff or print the result",
    license="MIT",
)
