"""
DevTrace setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="devtrace",
    version="1.0.0",
    description="DevTrace — development task tracking with quality scoring and dashboard metrics",
    packages=find_packages(include=["devtrace", "devtrace.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "devtrace=devtrace.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "fastapi>=0.110",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.27",
        ],
    },
)
