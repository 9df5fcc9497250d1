"""
Steam Turbine Model

Converts the steam input signal coming from the reactor into shaft speed
and electrical output. The rotor follows the steam demand with a
first-order lag, and the machine wears slowly in proportion to its speed.
Worn turbines lose both output and efficiency until they are maintained.

Relations:
- target_rpm = steam_input / 100 * max_rpm
- output = rpm / max_rpm * max_output * efficiency * health / 100
- efficiency = 0.5 + 0.5 * health / 100
"""

import math
from typing import Dict, Optional

from ..config import TurbineConfig


class Turbine:
    """
    Steam turbine rotational model

    ``steam_input`` (percent of rated steam) is written by the driver
    each tick before ``update`` runs. It is not clamped, and exceeds 100
    whenever core power is above ``max_power``.
    """

    def __init__(self, config: Optional[TurbineConfig] = None):
        """Initialize a stopped turbine at full health"""
        self.config = config if config is not None else TurbineConfig()

        self.max_rpm = self.config.max_rpm
        self.max_output = self.config.max_output

        self.rpm = 0.0
        self.efficiency = 1.0
        self.health = 100.0
        self.steam_input = 0.0
        self.output = 0.0
        self.angle = 0.0                # radians, only used for rendering

    def update(self, delta_time: float) -> None:
        """
        Advance the turbine by one frame

        Args:
            delta_time: Elapsed time in milliseconds
        """
        seconds = delta_time / 1000.0

        target_rpm = (self.steam_input / 100.0) * self.max_rpm
        self.rpm += (target_rpm - self.rpm) * min(1.0, seconds * self.config.spin_up_rate)

        self.angle += (self.rpm / 60.0) * seconds * 2.0 * math.pi

        # Output uses the efficiency in effect during this frame
        self.output = self.calculate_output()

        self.health -= (self.rpm / self.max_rpm) * self.config.wear_rate * seconds
        self.health = max(0.0, self.health)
        self.efficiency = 0.5 + (self.health / 100.0) * 0.5

    def calculate_output(self) -> float:
        """Electrical output (MW) for the current speed, efficiency and health"""
        return (self.rpm / self.max_rpm) * self.max_output * self.efficiency * (self.health / 100.0)

    def maintain(self) -> None:
        """Restore the turbine to full health. Cost is handled by the reactor."""
        self.health = 100.0
        self.efficiency = 1.0

    def get_state_dict(self) -> Dict[str, float]:
        """Get current state as dictionary for logging/monitoring"""
        return {
            'rpm': self.rpm,
            'max_rpm': self.max_rpm,
            'efficiency': self.efficiency,
            'health': self.health,
            'steam_input': self.steam_input,
            'output': self.output,
            'max_output': self.max_output,
            'angle': self.angle,
        }
