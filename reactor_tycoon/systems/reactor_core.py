"""
Reactor Core Model

The orchestrating component of the plant. One ``update`` call advances, in
a fixed order:

1. Damage gate (a damaged core is frozen)
2. Overdrive timer and cooldown
3. Control rod and coolant flow actuator lag (rods pick up sensor noise
   while a glitch event is active)
4. Fission rate from rod withdrawal and average fuel health
5. Core temperature from heating minus cooling, with random fluctuation
6. Power output, proportional to fission rate and temperature (not capped)
7. Steam particle visuals
8. Fuel burn-up and coolant degradation
9. Meltdown check and SCRAM handling, both with balance penalties
10. Random events
11. Financial step, billed against the turbine output passed in

State machines:
- Overdrive: inactive -> active (paid) -> cooldown -> inactive
- Damage: normal -> damaged (terminal)
- Paid maintenance: fuel, coolant and turbine overhaul, each only when the
  balance covers its fixed price
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from ..config import PlantConfig
from ..random_source import RandomSource, create_random_source
from . import notifications
from .events import ActiveEvent, EventSystem
from .financials import FinancialEngine, FinancialReport
from .turbine import Turbine

logger = logging.getLogger(__name__)

WEAR_COMPONENTS = ("turbine_bearing", "pump_seals", "valve_integrity", "sensor_accuracy")


@dataclass
class FuelRod:
    """A single fuel rod"""
    health: float = 100.0


@dataclass
class CoolantChemistry:
    """Primary coolant chemistry readings"""
    ph: float = 7.0
    conductivity: float = 100.0                     # µS/cm
    dissolved_oxygen: float = 5.0                   # ppb


@dataclass
class SteamParticle:
    """Transient steam puff for the vessel renderer"""
    x: float
    y: float
    velocity: float
    opacity: float = 1.0


@dataclass
class LedgerEntry:
    """An explicit penalty or bonus applied to the balance"""
    reason: str
    amount: float                                   # Signed amount actually applied


class ReactorCore:
    """
    Reactor core with thermal, fission and coolant dynamics

    The random source is shared with the event scheduler and the financial
    engine so a whole plant can be replayed from one seed.
    """

    def __init__(self, config: Optional[PlantConfig] = None, rng: Optional[RandomSource] = None,
                 bus: Optional[notifications.PlantEventBus] = None):
        """
        Initialize a cold, shut-down core

        Args:
            config: Plant configuration (defaults used when omitted)
            rng: Random source for all stochastic terms
            bus: Notification bus for collaborator-facing transitions
        """
        self.plant_config = config if config is not None else PlantConfig()
        self.config = self.plant_config.reactor
        self.economy_config = self.plant_config.economy
        self.rng = rng if rng is not None else create_random_source()
        self.bus = bus

        cfg = self.config

        # Thermal state
        self.temperature = cfg.ambient_temperature
        self.original_max_temp = cfg.max_temp
        self.max_temp = cfg.max_temp
        self.power_output = 0.0
        self.max_power = cfg.max_power
        self.fission_rate = 0.0

        # Actuators (100 = rods fully inserted)
        self.target_control_rod_position = 100.0
        self.control_rod_position = 100.0
        self.target_coolant_flow = 100.0
        self.coolant_flow = 100.0
        self.control_rod_noise_amount = 0.0

        # Safety
        self.damaged = False
        self.scram_active = False
        self._high_temperature_alarm = False

        # Overdrive
        self.overdrive_active = False
        self.overdrive_time_remaining = 0.0
        self.overdrive_cooldown_remaining = 0.0

        # Consumables and components
        self.fuel_rods: List[FuelRod] = [FuelRod() for _ in range(cfg.fuel_rod_count)]
        self.coolant_quality = 100.0
        self.coolant_efficiency = 1.0
        self.coolant_chemistry = CoolantChemistry(
            ph=self.economy_config.ph_target,
            conductivity=self.economy_config.conductivity_target,
            dissolved_oxygen=self.economy_config.dissolved_oxygen_target,
        )
        self.wear_factors: Dict[str, float] = {name: 100.0 for name in WEAR_COMPONENTS}
        self.grid_zones = copy.deepcopy(self.economy_config.grid_zones)

        # Ledger
        self.revenue = 0.0
        self.operating_costs = 0.0
        self.profit = 0.0
        self.total_profit = 0.0
        self.tick_adjustments: List[LedgerEntry] = []
        self.last_report: Optional[FinancialReport] = None

        self.steam_particles: List[SteamParticle] = []

        self.event_system = EventSystem(self.plant_config.events, self.rng, bus=bus)
        self.financials = FinancialEngine(self.economy_config, self.rng)

    # === PUBLISHED VIEWS ===

    @property
    def events(self) -> List[ActiveEvent]:
        """Active events, front is the one to display"""
        return self.event_system.active_events

    @property
    def power_demand(self) -> float:
        return self.event_system.power_demand

    @property
    def average_fuel_health(self) -> float:
        return float(np.mean([rod.health for rod in self.fuel_rods]))

    @property
    def overdrive_available(self) -> bool:
        return (not self.damaged
                and not self.overdrive_active
                and self.overdrive_cooldown_remaining <= 0
                and self.total_profit >= self.config.overdrive.activation_cost)

    # === TICK ===

    def update(self, delta_time: float, turbine: Turbine) -> None:
        """
        Advance the core by one frame

        Args:
            delta_time: Elapsed time in milliseconds
            turbine: The plant turbine. Its output has not been updated for
                this frame yet, so finances bill the previous frame's output.
        """
        if self.damaged:
            return

        cfg = self.config
        seconds = delta_time / 1000.0
        self.tick_adjustments = []

        self._update_overdrive(delta_time)

        noise = 0.0
        if self.control_rod_noise_amount:
            noise = (float(self.rng.random()) - 0.5) * self.control_rod_noise_amount
        rod_gap = (self.target_control_rod_position - self.control_rod_position) + noise
        self.control_rod_position += rod_gap * min(1.0, seconds * cfg.rod_response)
        self.control_rod_position = float(np.clip(self.control_rod_position, 0.0, 100.0))

        flow_gap = self.target_coolant_flow - self.coolant_flow
        self.coolant_flow += flow_gap * min(1.0, seconds * cfg.coolant_response)
        self.coolant_flow = float(np.clip(self.coolant_flow, 0.0, 100.0))

        self.fission_rate = max(0.0, (100.0 - self.control_rod_position) / 100.0) * \
            (self.average_fuel_health / 100.0)

        power_factor = self.fission_rate * (1.0 + float(self.rng.random()) * cfg.power_noise)
        cooling_factor = (self.coolant_flow / 100.0) * (self.coolant_quality / 100.0) * \
            (1.0 + float(self.rng.random()) * cfg.cooling_noise)
        temp_change = (power_factor * cfg.heating_coefficient - cooling_factor * cfg.cooling_coefficient) * seconds
        self.temperature = max(cfg.ambient_temperature, self.temperature + temp_change)

        self.power_output = self.fission_rate * self.max_power * (self.temperature / cfg.reference_temperature)

        self._update_steam_particles(delta_time)

        for rod in self.fuel_rods:
            rod.health = max(0.0, rod.health - self.fission_rate * cfg.fuel_burn_rate * seconds)

        coolant_degradation = (self.temperature / self.max_temp) * cfg.coolant_degradation_rate * seconds
        self.coolant_quality = max(0.0, self.coolant_quality - coolant_degradation)

        self._check_high_temperature()

        if self.temperature > self.max_temp:
            self.damaged = True
            self.apply_penalty(cfg.meltdown_penalty, "meltdown")
            logger.warning("Core damaged at %.1f°C (limit %.1f°C)", self.temperature, self.max_temp)
            self._notify(notifications.REACTOR_DAMAGED, {'temperature': self.temperature})

        # SCRAM keeps overriding the rod target, and is charged every tick it stays active
        if self.scram_active:
            self.target_control_rod_position = 100.0
            self.apply_penalty(cfg.scram_penalty, "scram")

        self.event_system.update(self, turbine, delta_time)

        report = self.financials.update(self, turbine.output, delta_time)
        self.revenue = report.revenue
        self.operating_costs = report.operating_costs
        self.profit = report.profit
        self.last_report = report

    def _update_overdrive(self, delta_time: float) -> None:
        if self.overdrive_active:
            self.overdrive_time_remaining -= delta_time
            if self.overdrive_time_remaining <= 0:
                self.overdrive_active = False
                self.max_temp = self.original_max_temp
                self.overdrive_time_remaining = 0.0
                self.overdrive_cooldown_remaining = self.config.overdrive.cooldown
                logger.info("Overdrive ended, cooldown %.0f ms", self.overdrive_cooldown_remaining)
                self._notify(notifications.OVERDRIVE_DEACTIVATED)
        elif self.overdrive_cooldown_remaining > 0:
            self.overdrive_cooldown_remaining = max(0.0, self.overdrive_cooldown_remaining - delta_time)

    def _update_steam_particles(self, delta_time: float) -> None:
        if self.temperature > 100 and float(self.rng.random()) < (self.power_output / self.max_power) * 0.5:
            self.steam_particles.append(SteamParticle(
                x=float(self.rng.random()) * 600,
                y=400.0,
                velocity=float(self.rng.random()) * 2 + 1,
            ))

        frames = delta_time / 16.0
        for particle in self.steam_particles:
            particle.y -= particle.velocity * frames
            particle.opacity -= 0.01 * frames
        self.steam_particles = [p for p in self.steam_particles if p.opacity > 0]

    def _check_high_temperature(self) -> None:
        threshold = self.max_temp * self.config.high_temperature_fraction
        if self.temperature > threshold and not self._high_temperature_alarm:
            self._high_temperature_alarm = True
            logger.warning("High core temperature: %.1f°C", self.temperature)
            self._notify(notifications.HIGH_TEMPERATURE,
                         {'temperature': self.temperature, 'threshold': threshold})
        elif self.temperature <= threshold:
            self._high_temperature_alarm = False

    # === LEDGER ===

    def apply_penalty(self, amount: float, reason: str) -> float:
        """
        Deduct a penalty from the balance, never going below zero

        Returns:
            The amount actually deducted
        """
        before = self.total_profit
        self.total_profit = max(0.0, self.total_profit - amount)
        applied = self.total_profit - before
        self.tick_adjustments.append(LedgerEntry(reason=reason, amount=applied))
        return -applied

    def apply_bonus(self, amount: float, reason: str) -> None:
        self.total_profit += amount
        self.tick_adjustments.append(LedgerEntry(reason=reason, amount=amount))

    def _try_spend(self, cost: float, action: str) -> bool:
        if self.total_profit < cost:
            logger.debug("Cannot afford %s: balance %.0f, cost %.0f", action, self.total_profit, cost)
            return False
        self.total_profit -= cost
        return True

    # === COMMANDS ===

    def adjust_control_rods(self, position: float) -> None:
        """Set the rod target (0 = withdrawn, 100 = inserted), clamped"""
        if self.damaged or self.scram_active:
            return
        self.target_control_rod_position = float(np.clip(position, 0.0, 100.0))

    def adjust_coolant_flow(self, flow: float) -> None:
        """Set the coolant flow target (percent), clamped"""
        if self.damaged:
            return
        self.target_coolant_flow = float(np.clip(flow, 0.0, 100.0))

    def scram(self) -> None:
        """Emergency shutdown. There is no way to clear it."""
        if not self.scram_active:
            logger.info("SCRAM triggered")
            self.scram_active = True
            self._notify(notifications.SCRAM_TRIGGERED)

    def activate_overdrive(self) -> bool:
        """
        Start overdrive if possible

        Returns:
            True if overdrive was activated
        """
        if not self.overdrive_available:
            logger.debug("Overdrive refused (active=%s, cooldown=%.0f, balance=%.0f, damaged=%s)",
                         self.overdrive_active, self.overdrive_cooldown_remaining,
                         self.total_profit, self.damaged)
            return False

        od = self.config.overdrive
        self.total_profit -= od.activation_cost
        self.overdrive_active = True
        self.overdrive_time_remaining = od.duration
        self.max_temp = self.original_max_temp + od.temp_bonus
        logger.info("Overdrive activated, max temperature %.0f°C", self.max_temp)
        self._notify(notifications.OVERDRIVE_ACTIVATED, {'max_temp': self.max_temp})
        return True

    def replace_fuel_rods(self) -> bool:
        """Replace every fuel rod. Returns False if the balance is too low."""
        cost = self.config.maintenance.fuel
        if not self._try_spend(cost, "fuel replacement"):
            return False
        self.fuel_rods = [FuelRod() for _ in range(self.config.fuel_rod_count)]
        self._maintenance_done("replace_fuel_rods", cost)
        return True

    def replace_coolant(self) -> bool:
        """Replace the coolant. Returns False if the balance is too low."""
        cost = self.config.maintenance.coolant
        if not self._try_spend(cost, "coolant replacement"):
            return False
        self.coolant_quality = 100.0
        self._maintenance_done("replace_coolant", cost)
        return True

    def maintain_turbine(self, turbine: Turbine) -> bool:
        """Overhaul the turbine. Returns False if the balance is too low."""
        cost = self.config.maintenance.turbine
        if not self._try_spend(cost, "turbine maintenance"):
            return False
        turbine.maintain()
        self._maintenance_done("maintain_turbine", cost)
        return True

    def _maintenance_done(self, action: str, cost: float) -> None:
        logger.info("Maintenance %s completed for %.0f", action, cost)
        self._notify(notifications.MAINTENANCE_COMPLETED, {'action': action, 'cost': cost})

    def _notify(self, kind: str, data: Optional[Dict[str, Any]] = None) -> None:
        if self.bus is not None:
            self.bus.publish(kind, data)

    # === STATE ===

    def get_state_dict(self) -> Dict[str, Any]:
        """Get current state as dictionary for logging/monitoring"""
        return {
            'temperature': self.temperature,
            'max_temp': self.max_temp,
            'power_output': self.power_output,
            'max_power': self.max_power,
            'fission_rate': self.fission_rate,
            'control_rod_position': self.control_rod_position,
            'target_control_rod_position': self.target_control_rod_position,
            'coolant_flow': self.coolant_flow,
            'target_coolant_flow': self.target_coolant_flow,
            'coolant_quality': self.coolant_quality,
            'coolant_efficiency': self.coolant_efficiency,
            'control_rod_noise_amount': self.control_rod_noise_amount,
            'fuel_rod_health': [rod.health for rod in self.fuel_rods],
            'wear_factors': dict(self.wear_factors),
            'coolant_chemistry': dict(self.coolant_chemistry.__dict__),
            'grid_zones': [dict(zone.__dict__) for zone in self.grid_zones],
            'damaged': self.damaged,
            'scram_active': self.scram_active,
            'overdrive_active': self.overdrive_active,
            'overdrive_time_remaining': self.overdrive_time_remaining,
            'overdrive_cooldown_remaining': self.overdrive_cooldown_remaining,
            'revenue': self.revenue,
            'operating_costs': self.operating_costs,
            'profit': self.profit,
            'total_profit': self.total_profit,
            'power_demand': self.power_demand,
            'events': [event.get_state_dict() for event in self.events],
            'steam_particles': [dict(p.__dict__) for p in self.steam_particles],
        }
