"""Package configuration for kanban-metrics.

This file defines installation metadata and console entry points.
"""

import os

import setuptools


def read_requirements(path):
    """Return requirement lines from `path`, skipping comments and includes."""
    try:
        with open(path, encoding="utf-8") as f:
            return [
                line.strip()
                for line in f.read().splitlines()
                if line.strip()
                and not line.strip().startswith("#")
                and not line.strip().startswith("-r ")
            ]
    except OSError:
        return []


def main():
    """Entrypoint for invoking setuptools.setup with package metadata."""

    here = os.path.abspath(os.path.dirname(__file__))

    # Safely read long description
    try:
        with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
            long_description = f.read()
    except OSError:
        long_description = ""

    setuptools.setup(
        name="kanban-metrics",
        version="0.1.0",
        description="Kanban flow metrics for Linear teams",
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        keywords="kanban linear analytics metrics cycle-time throughput",
        packages=setuptools.find_packages(
            include=["kanban_metrics", "kanban_metrics.*"]
        ),
        install_requires=read_requirements(os.path.join(here, "requirements-prod.txt")),
        extras_require={
            "test": read_requirements(os.path.join(here, "requirements-dev.txt")),
        },
        python_requires=">=3.8",
        entry_points={
            "console_scripts": [
                "kanban-metrics=kanban_metrics.cli:main",
            ],
        },
    )


if __name__ == "__main__":
    main()
