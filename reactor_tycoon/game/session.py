"""
Power Plant Game Session

This module drives the simulation: it owns the turbine, the reactor and the
notification bus for one play session and advances them in the order the
game depends on.

Per frame:
1. The turbine steam input is set from the reactor's previous-frame power
2. The reactor updates; its financial step bills the turbine output, which
   still holds the previous frame's value
3. The turbine updates
4. Ambient sound levels are re-evaluated

Revenue therefore lags the turbine by one frame.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import PlantConfig
from ..random_source import RandomSource, create_random_source
from ..systems.notifications import PlantEventBus
from ..systems.reactor_core import ReactorCore
from ..systems.turbine import Turbine
from .ambient import AmbientSoundTracker

logger = logging.getLogger(__name__)


class PlantStatus(Enum):
    """Overall plant status shown to the player"""
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class PlantSnapshot:
    """Everything the UI, renderers and audio read after a frame"""
    # Core
    time_elapsed: float                             # ms
    temperature: float
    max_temp: float
    power_output: float
    max_power: float
    control_rod_position: float
    coolant_flow: float
    coolant_quality: float
    fuel_rod_health: List[float]
    average_fuel_health: float
    damaged: bool
    scram_active: bool

    # Overdrive
    overdrive_active: bool
    overdrive_time_remaining: float
    overdrive_cooldown_remaining: float

    # Turbine
    turbine_rpm: float
    turbine_max_rpm: float
    turbine_health: float
    turbine_output: float
    turbine_angle: float

    # Economy
    revenue: float
    operating_costs: float
    profit: float
    total_profit: float
    power_demand: float

    # Game
    events: List[Dict[str, Any]]
    status: PlantStatus
    status_message: str
    alarms: List[str]


class PlantSession:
    """One play session: a reactor, its turbine and their driver"""

    def __init__(self, config: Optional[PlantConfig] = None, rng: Optional[RandomSource] = None,
                 seed: Optional[int] = None):
        """
        Create a new session

        Args:
            config: Plant configuration
            rng: Random source; created from ``seed`` when omitted
            seed: Seed for the default random source
        """
        self.config = config if config is not None else PlantConfig()
        self.rng = rng if rng is not None else create_random_source(seed)
        self.bus = PlantEventBus()

        self.turbine = Turbine(self.config.turbine)
        self.reactor = ReactorCore(self.config, self.rng, bus=self.bus)
        self.ambient = AmbientSoundTracker(self.bus)

        self.time_elapsed = 0.0
        self.frames = 0
        logger.info("Plant session created: %s", self.config.get_summary())

    # === DRIVER ===

    def step(self, delta_time: float) -> PlantSnapshot:
        """
        Advance the plant by one frame

        Args:
            delta_time: Elapsed wall-clock time in milliseconds

        Returns:
            Snapshot after the frame
        """
        reactor = self.reactor
        turbine = self.turbine

        turbine.steam_input = reactor.power_output / reactor.max_power * 100.0
        reactor.update(delta_time, turbine)
        turbine.update(delta_time)
        self.ambient.update(reactor, turbine)

        self.time_elapsed += delta_time
        self.frames += 1
        self.bus.current_time = self.time_elapsed
        return self.get_snapshot()

    def run(self, duration: float, delta_time: float = 16.0) -> PlantSnapshot:
        """Advance the plant for ``duration`` ms in fixed frames"""
        if delta_time <= 0:
            raise ValueError(f"delta_time must be positive, got {delta_time}")
        logger.debug("Running %.0f ms in %.0f ms frames", duration, delta_time)
        snapshot = self.get_snapshot()
        remaining = duration
        while remaining > 0:
            frame = min(delta_time, remaining)
            snapshot = self.step(frame)
            remaining -= frame
        return snapshot

    # === COMMANDS ===

    def adjust_control_rods(self, position: float) -> None:
        self.reactor.adjust_control_rods(position)

    def adjust_coolant_flow(self, flow: float) -> None:
        self.reactor.adjust_coolant_flow(flow)

    def scram(self) -> None:
        self.reactor.scram()

    def activate_overdrive(self) -> bool:
        return self.reactor.activate_overdrive()

    def replace_fuel_rods(self) -> bool:
        return self.reactor.replace_fuel_rods()

    def replace_coolant(self) -> bool:
        return self.reactor.replace_coolant()

    def maintain_turbine(self) -> bool:
        return self.reactor.maintain_turbine(self.turbine)

    # === STATUS ===

    def evaluate_status(self) -> tuple:
        """
        Classify the plant condition

        Returns:
            Tuple of (PlantStatus, message)
        """
        reactor = self.reactor
        cfg = reactor.config
        if reactor.damaged:
            return PlantStatus.DANGER, "REACTOR DAMAGED - CORE MELTDOWN"
        if reactor.temperature > reactor.max_temp * cfg.high_temperature_fraction:
            return PlantStatus.DANGER, "CRITICAL TEMPERATURE WARNING"
        if reactor.temperature > reactor.max_temp * cfg.warning_temperature_fraction:
            return PlantStatus.WARNING, "High temperature warning"
        return PlantStatus.SAFE, "All systems functioning normally."

    def get_alarms(self) -> List[str]:
        """Active alarm annunciators"""
        reactor = self.reactor
        alarms = []
        if reactor.damaged:
            alarms.append("CORE DAMAGED")
        if reactor.scram_active:
            alarms.append("REACTOR SCRAM ACTIVATED")
        if reactor.temperature > reactor.max_temp * reactor.config.high_temperature_fraction:
            alarms.append("HIGH CORE TEMPERATURE")
        if reactor.power_output > reactor.max_power * 0.8:
            alarms.append("HIGH POWER OUTPUT")
        if self.turbine.health < 30:
            alarms.append("TURBINE HEALTH CRITICAL")
        if reactor.average_fuel_health < 30:
            alarms.append("FUEL DEPLETED")
        if reactor.coolant_quality < 30:
            alarms.append("COOLANT QUALITY LOW")
        return alarms

    def get_snapshot(self) -> PlantSnapshot:
        """Get current plant state for the frontend"""
        reactor = self.reactor
        turbine = self.turbine
        status, message = self.evaluate_status()

        return PlantSnapshot(
            time_elapsed=self.time_elapsed,
            temperature=reactor.temperature,
            max_temp=reactor.max_temp,
            power_output=reactor.power_output,
            max_power=reactor.max_power,
            control_rod_position=reactor.control_rod_position,
            coolant_flow=reactor.coolant_flow,
            coolant_quality=reactor.coolant_quality,
            fuel_rod_health=[rod.health for rod in reactor.fuel_rods],
            average_fuel_health=reactor.average_fuel_health,
            damaged=reactor.damaged,
            scram_active=reactor.scram_active,
            overdrive_active=reactor.overdrive_active,
            overdrive_time_remaining=reactor.overdrive_time_remaining,
            overdrive_cooldown_remaining=reactor.overdrive_cooldown_remaining,
            turbine_rpm=turbine.rpm,
            turbine_max_rpm=turbine.max_rpm,
            turbine_health=turbine.health,
            turbine_output=turbine.output,
            turbine_angle=turbine.angle,
            revenue=reactor.revenue,
            operating_costs=reactor.operating_costs,
            profit=reactor.profit,
            total_profit=reactor.total_profit,
            power_demand=reactor.power_demand,
            events=[event.get_state_dict() for event in reactor.events],
            status=status,
            status_message=message,
            alarms=self.get_alarms(),
        )

    def get_summary(self) -> Dict[str, Any]:
        """Final session summary"""
        return {
            'time_elapsed_s': self.time_elapsed / 1000.0,
            'frames': self.frames,
            'total_profit': self.reactor.total_profit,
            'damaged': self.reactor.damaged,
            'scram_active': self.reactor.scram_active,
            'average_fuel_health': self.reactor.average_fuel_health,
            'coolant_quality': self.reactor.coolant_quality,
            'turbine_health': self.turbine.health,
            'notifications': self.bus.notifications_published,
        }
