"""
Plant Configuration System

This module provides the configuration for every part of the plant: the
turbine, the reactor core (including overdrive and maintenance pricing),
the economic model and the random event scheduler.

All values default to the tuning of the shipped game. A ``PlantConfig`` can
be loaded from YAML to build alternative difficulty presets without
touching code.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from dataclass_wizard import YAMLWizard

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class TurbineConfig:
    """Configuration for the steam turbine"""

    max_rpm: float = 3600.0                         # RPM at 100% steam input
    max_output: float = 1000.0                      # MW at max RPM, full health
    spin_up_rate: float = 0.3                       # Fraction of RPM gap closed per second
    wear_rate: float = 0.001                        # Health lost per second at max RPM

    def __post_init__(self):
        errors = []
        if self.max_rpm <= 0:
            errors.append("max_rpm must be positive")
        if self.max_output <= 0:
            errors.append("max_output must be positive")
        if self.spin_up_rate <= 0:
            errors.append("spin_up_rate must be positive")
        if self.wear_rate < 0:
            errors.append("wear_rate must not be negative")
        if errors:
            raise ConfigurationError("Turbine", errors)


@dataclass
class OverdriveConfig:
    """Configuration for the overdrive boost"""

    duration: float = 45000.0                       # ms overdrive stays active
    cooldown: float = 5000.0                        # ms before it can be used again
    activation_cost: float = 30000.0                # Currency debited on activation
    temp_bonus: float = 400.0                       # °C added to max_temp while active
    wear_multiplier: float = 3.0                    # Component wear multiplier while active


@dataclass
class MaintenanceCostConfig:
    """Fixed prices of the paid maintenance operations"""

    fuel: float = 1_000_000.0                       # Replace all fuel rods
    coolant: float = 100_000.0                      # Replace coolant
    turbine: float = 250_000.0                      # Overhaul turbine


@dataclass
class ReactorConfig:
    """Configuration for the reactor core"""

    # Limits
    max_temp: float = 1000.0                        # °C damage threshold (without overdrive)
    max_power: float = 1000.0                       # MW nominal output
    ambient_temperature: float = 20.0               # °C floor for core temperature
    reference_temperature: float = 500.0            # °C at which output equals fission * max_power

    # Actuator lag
    rod_response: float = 0.5                       # Fraction of rod gap closed per second
    coolant_response: float = 0.5                   # Fraction of flow gap closed per second

    # Thermal model
    heating_coefficient: float = 70.0               # °C/s at full fission
    cooling_coefficient: float = 40.0               # °C/s at full flow and quality
    power_noise: float = 0.2                        # Max fractional boost of heating
    cooling_noise: float = 0.1                      # Max fractional boost of cooling

    # Degradation
    fuel_rod_count: int = 5
    fuel_burn_rate: float = 0.01                    # Health lost per second at full fission
    coolant_degradation_rate: float = 0.05          # Quality lost per second at max_temp

    # Penalties
    meltdown_penalty: float = 5_000_000.0           # One-time penalty on core damage
    scram_penalty: float = 1_000_000.0              # Applied every tick while SCRAM is active

    # Alarm thresholds as fractions of max_temp
    high_temperature_fraction: float = 0.8
    warning_temperature_fraction: float = 0.6

    overdrive: OverdriveConfig = field(default_factory=OverdriveConfig)
    maintenance: MaintenanceCostConfig = field(default_factory=MaintenanceCostConfig)

    def __post_init__(self):
        errors = []
        if self.max_temp <= self.ambient_temperature:
            errors.append("max_temp must be above ambient_temperature")
        if self.max_power <= 0:
            errors.append("max_power must be positive")
        if self.reference_temperature <= 0:
            errors.append("reference_temperature must be positive")
        if self.fuel_rod_count <= 0:
            errors.append("fuel_rod_count must be positive")
        if not (0.0 < self.warning_temperature_fraction <= self.high_temperature_fraction <= 1.0):
            errors.append("temperature fractions must satisfy 0 < warning <= high <= 1")
        if self.overdrive.duration <= 0:
            errors.append("overdrive duration must be positive")
        if self.overdrive.cooldown < 0 or self.overdrive.activation_cost < 0:
            errors.append("overdrive cooldown and cost must not be negative")
        for name in ("fuel", "coolant", "turbine"):
            if getattr(self.maintenance, name) < 0:
                errors.append(f"maintenance cost '{name}' must not be negative")
        if errors:
            raise ConfigurationError("Reactor", errors)


@dataclass
class GridZone:
    """A demand segment of the grid"""

    name: str
    demand: float                                   # Fraction of max_power the zone wants
    price_multiplier: float                         # Revenue multiplier
    stability_required: float                       # Demand fraction needed for the bonus


def _default_grid_zones() -> List[GridZone]:
    return [
        GridZone(name="Industrial", demand=0.8, price_multiplier=1.2, stability_required=0.95),
        GridZone(name="Residential", demand=0.5, price_multiplier=1.0, stability_required=0.9),
        GridZone(name="Commercial", demand=0.6, price_multiplier=1.1, stability_required=0.85),
    ]


@dataclass
class EconomyConfig:
    """Configuration for revenue, operating cost and component wear"""

    power_price: float = 500.0                      # $/MWh
    base_operating_cost: float = 100_000.0          # $/hr
    time_acceleration: float = 5.0                  # Billed hours per simulated hour

    # Operating cost terms
    wear_cost_fraction: float = 0.1                 # Of base cost, per fully worn component
    output_cost_fraction: float = 0.5               # Of base cost, at full power output

    # Grid stability
    stability_bonus: float = 1.2
    stability_penalty: float = 0.8

    # Component wear
    wear_rate: float = 0.1                          # Max wear per billed hour at full power

    # Coolant chemistry targets and cost weights
    ph_target: float = 7.0
    conductivity_target: float = 100.0              # µS/cm
    dissolved_oxygen_target: float = 5.0            # ppb
    ph_cost_weight: float = 1000.0
    conductivity_cost_weight: float = 10.0
    dissolved_oxygen_cost_weight: float = 100.0

    # Chemistry random walk half-widths per billed hour
    ph_drift: float = 0.05
    conductivity_drift: float = 2.5
    dissolved_oxygen_drift: float = 0.25

    grid_zones: List[GridZone] = field(default_factory=_default_grid_zones)

    def __post_init__(self):
        errors = []
        if self.time_acceleration <= 0:
            errors.append("time_acceleration must be positive")
        if self.power_price < 0 or self.base_operating_cost < 0:
            errors.append("prices and costs must not be negative")
        if not self.grid_zones:
            errors.append("at least one grid zone is required")
        for zone in self.grid_zones:
            if zone.demand <= 0:
                errors.append(f"grid zone '{zone.name}' demand must be positive")
        if errors:
            raise ConfigurationError("Economy", errors)


@dataclass
class EventConfig:
    """Configuration for the random event scheduler"""

    spawn_rate: float = 0.002                       # Spawn probability per second
    max_concurrent: int = 2                         # Active events cap
    initial_power_demand: float = 0.5
    min_power_demand: float = 0.3
    max_power_demand: float = 0.9
    power_demand_drift: float = 0.01                # Full width of demand walk per second

    def __post_init__(self):
        errors = []
        if not (0.0 <= self.spawn_rate <= 1.0):
            errors.append("spawn_rate must be within [0, 1]")
        if self.max_concurrent < 0:
            errors.append("max_concurrent must not be negative")
        if not (self.min_power_demand <= self.initial_power_demand <= self.max_power_demand):
            errors.append("initial_power_demand must lie within the demand bounds")
        if errors:
            raise ConfigurationError("Event", errors)


@dataclass
class PlantConfig(YAMLWizard):
    """
    Complete plant configuration

    Aggregates every subsystem section. Load alternative presets with
    ``PlantConfig.from_yaml_file(path)`` or ``load_config(path)``.
    """

    turbine: TurbineConfig = field(default_factory=TurbineConfig)
    reactor: ReactorConfig = field(default_factory=ReactorConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    events: EventConfig = field(default_factory=EventConfig)

    def get_summary(self) -> dict:
        """Short human-readable summary of the main tuning values"""
        return {
            'max_temp': self.reactor.max_temp,
            'max_power': self.reactor.max_power,
            'overdrive_cost': self.reactor.overdrive.activation_cost,
            'power_price': self.economy.power_price,
            'time_acceleration': self.economy.time_acceleration,
            'grid_zones': [zone.name for zone in self.economy.grid_zones],
            'event_spawn_rate': self.events.spawn_rate,
        }


def load_config(path: Optional[Union[str, Path]] = None) -> PlantConfig:
    """
    Load a plant configuration

    Args:
        path: YAML file to read; defaults are used when omitted

    Returns:
        PlantConfig instance
    """
    if path is None:
        return PlantConfig()
    logger.info("Loading plant configuration from %s", path)
    return PlantConfig.from_yaml_file(str(path))
