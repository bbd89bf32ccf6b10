"""Package setup for github-keys."""

from setuptools import setup, find_packages

setup(
    name="github-keys",
    version="1.0.0",
    description="Sync SSH public keys of GitHub organization members into authorized_keys",
    packages=find_packages(include=["github_keys", "github_keys.*"], exclude=["github_keys.tests"]),
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "github-keys=github_keys.cli:app",
        ],
    },
)
