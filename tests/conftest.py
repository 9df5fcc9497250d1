"""
Shared fixtures for the reactor tycoon test suite.
"""

import pytest

from reactor_tycoon.config import EventConfig, PlantConfig
from reactor_tycoon.systems.notifications import PlantEventBus
from reactor_tycoon.systems.reactor_core import ReactorCore
from reactor_tycoon.systems.turbine import Turbine


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class SequenceRandom:
    """Random source that cycles through a list of values."""

    def __init__(self, values):
        self.values = list(values)
        self.index = 0

    def random(self) -> float:
        value = self.values[self.index % len(self.values)]
        self.index += 1
        return value


@pytest.fixture
def rng():
    return FixedRandom(0.5)


@pytest.fixture
def quiet_config():
    """Default plant with the event scheduler switched off."""
    return PlantConfig(events=EventConfig(spawn_rate=0.0))


@pytest.fixture
def bus():
    return PlantEventBus()


@pytest.fixture
def turbine():
    return Turbine()


@pytest.fixture
def reactor(quiet_config, rng, bus):
    return ReactorCore(quiet_config, rng, bus=bus)
