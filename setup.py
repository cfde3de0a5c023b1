"""Setup script for git-smart-http."""

from setuptools import setup, find_packages


def read_requirements(filename):
    with open(filename) as f:
        # Filter out comments and empty lines
        return [
            line.strip() for line in f.read().splitlines()
            if line.strip() and not line.startswith("#")
        ]


setup(
    name="git-smart-http",
    version="0.1.0",
    description="Serve git repositories over the Smart HTTP protocol",
    author="git-smart-http developers",
    packages=find_packages(include=["gitsmart", "gitsmart.*"]),
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": read_requirements("requirements-test.txt"),
    },
    entry_points={
        "console_scripts": [
            "gitsmart=gitsmart.cli.main:app",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
