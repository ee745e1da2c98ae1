from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="lookup-registry",
    version="0.1.0",
    description="Address lookup table registry: state model, cached reader and HTTP lookup service",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "httpx",
        "numpy",
        "solders",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "lookup-registry=lookup_registry.__main__:main",
        ],
    },
)
