"""
Reactor Tycoon - real-time simulation engine for a power plant management game

A reactor core coupled to a steam turbine, an economic layer (revenue,
operating cost, balance) and random timed events that perturb the plant.

Main submodules:
- systems: turbine, reactor core, events, finances, notifications
- game: session driver, status and ambient sound levels
- config: tunable constants and YAML loading
"""

__version__ = "1.0.0"

from .config import PlantConfig, load_config
from .exceptions import ConfigurationError, ReactorTycoonError
from .game import PlantSession, PlantSnapshot, PlantStatus
from .random_source import create_random_source
from .systems import ReactorCore, Turbine

__all__ = [
    "PlantConfig",
    "load_config",
    "PlantSession",
    "PlantSnapshot",
    "PlantStatus",
    "ReactorCore",
    "Turbine",
    "create_random_source",
    "ReactorTycoonError",
    "ConfigurationError",
]
