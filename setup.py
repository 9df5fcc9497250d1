"""
Setup configuration for the Reactor Tycoon simulation engine.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="reactor-tycoon",
    version="1.0.0",
    author="Reactor Tycoon Team",
    description="Real-time reactor, turbine and economy simulation engine for a power plant management game",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["reactor_tycoon", "reactor_tycoon.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "dataclass-wizard>=0.22,<1.0",
        "PyYAML>=5.4",
        "rich>=10.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.10",
        ],
    },
    entry_points={
        "console_scripts": [
            "reactor-tycoon=reactor_tycoon.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Games/Entertainment :: Simulation",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
