"""
Random Plant Events

A fixed catalog of timed modifiers that perturb the plant, and the scheduler
that spawns, ticks and expires them.

Each archetype is plain data (kind, name, description, duration, numeric
parameters) plus two effect functions:

- ``on_start(reactor, turbine, rng, params)`` runs when the event is spawned
- ``on_expire(reactor, turbine, rng, params)`` runs when its timer runs out,
  usually checking whether the operator met the implied challenge and
  rewarding or penalizing the balance

Effects only touch the reactor and turbine they are handed, so they can be
exercised in isolation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ..config import EventConfig
from ..random_source import RandomSource, centered, create_random_source
from . import notifications

if TYPE_CHECKING:
    from .reactor_core import ReactorCore
    from .turbine import Turbine

logger = logging.getLogger(__name__)

EventEffect = Callable[["ReactorCore", "Turbine", RandomSource, Dict[str, float]], None]


class EventKind(Enum):
    """Event archetypes"""
    CHEMISTRY_IMBALANCE = "chemistry_imbalance"
    GRID_ZONE_EMERGENCY = "grid_zone_emergency"
    COMPONENT_WEAR_ALERT = "component_wear_alert"
    COOLANT_PUMP_MALFUNCTION = "coolant_pump_malfunction"
    POWER_DEMAND_SURGE = "power_demand_surge"
    CONTROL_ROD_SENSOR_GLITCH = "control_rod_sensor_glitch"
    TURBINE_VIBRATION = "turbine_vibration"
    GRID_FREQUENCY_DEVIATION = "grid_frequency_deviation"


def _no_effect(reactor, turbine, rng, params) -> None:
    pass


@dataclass
class EventArchetype:
    """Catalog entry describing one kind of event"""
    kind: EventKind
    name: str
    description: str
    duration: float                                 # ms
    params: Dict[str, float] = field(default_factory=dict)
    on_start: EventEffect = _no_effect
    on_expire: EventEffect = _no_effect


@dataclass
class ActiveEvent:
    """An event currently affecting the plant"""
    archetype: EventArchetype
    time_remaining: float                           # ms

    @property
    def kind(self) -> EventKind:
        return self.archetype.kind

    @property
    def name(self) -> str:
        return self.archetype.name

    @property
    def description(self) -> str:
        return self.archetype.description

    @property
    def expired(self) -> bool:
        return self.time_remaining <= 0

    def get_state_dict(self) -> Dict[str, object]:
        return {
            'kind': self.kind.value,
            'name': self.name,
            'description': self.description,
            'time_remaining': self.time_remaining,
        }


# === EFFECTS ===

def _chemistry_imbalance_start(reactor, turbine, rng, params):
    chemistry = reactor.coolant_chemistry
    chemistry.ph += centered(rng, params['ph_shift'])
    chemistry.conductivity += centered(rng, params['conductivity_shift'])
    chemistry.dissolved_oxygen += centered(rng, params['oxygen_shift'])


def _chemistry_imbalance_expire(reactor, turbine, rng, params):
    economy = reactor.economy_config
    chemistry = reactor.coolant_chemistry
    off_target = (
        abs(chemistry.ph - economy.ph_target) > params['ph_tolerance']
        or abs(chemistry.conductivity - economy.conductivity_target) > params['conductivity_tolerance']
        or abs(chemistry.dissolved_oxygen - economy.dissolved_oxygen_target) > params['oxygen_tolerance']
    )
    if off_target:
        reactor.coolant_efficiency *= params['efficiency_factor']
        reactor.apply_penalty(params['penalty'], "chemistry imbalance")


def _grid_emergency_start(reactor, turbine, rng, params):
    zone = reactor.grid_zones[0]
    zone.demand = params['demand']
    zone.price_multiplier = params['price_multiplier']


def _grid_emergency_expire(reactor, turbine, rng, params):
    if turbine.output < reactor.max_power * params['required_output']:
        reactor.apply_penalty(params['penalty'], "grid zone emergency missed")
    else:
        reactor.apply_bonus(params['bonus'], "grid zone emergency met")
    default_zone = reactor.economy_config.grid_zones[0]
    zone = reactor.grid_zones[0]
    zone.demand = default_zone.demand
    zone.price_multiplier = default_zone.price_multiplier


def _wear_alert_start(reactor, turbine, rng, params):
    for component in reactor.wear_factors:
        reactor.wear_factors[component] *= params['wear_factor']


def _wear_alert_expire(reactor, turbine, rng, params):
    average_wear = sum(reactor.wear_factors.values()) / len(reactor.wear_factors)
    if average_wear < params['critical_wear']:
        turbine.efficiency *= params['efficiency_factor']
        reactor.apply_penalty(params['penalty'], "component wear")


def _pump_malfunction_start(reactor, turbine, rng, params):
    reactor.coolant_efficiency = params['coolant_efficiency']


def _pump_malfunction_expire(reactor, turbine, rng, params):
    reactor.coolant_efficiency = 1.0


def _demand_surge_expire(reactor, turbine, rng, params):
    if turbine.output < reactor.max_power * params['required_output']:
        reactor.apply_penalty(params['penalty'], "power demand surge missed")


def _sensor_glitch_start(reactor, turbine, rng, params):
    reactor.control_rod_noise_amount = params['noise_amount']


def _sensor_glitch_expire(reactor, turbine, rng, params):
    reactor.control_rod_noise_amount = 0.0


def _vibration_start(reactor, turbine, rng, params):
    turbine.efficiency *= params['efficiency_factor']


def _vibration_expire(reactor, turbine, rng, params):
    if turbine.rpm > turbine.max_rpm * params['rpm_limit']:
        turbine.health = max(0.0, turbine.health - params['health_damage'])
    turbine.efficiency = 0.5 + (turbine.health / 100.0) * 0.5


def _frequency_deviation_expire(reactor, turbine, rng, params):
    deviation = abs(turbine.output / reactor.max_power - params['target_output'])
    if deviation > params['tolerance']:
        reactor.apply_penalty(params['penalty'], "grid frequency deviation")


def build_event_catalog() -> List[EventArchetype]:
    """Create the catalog of event archetypes, in selection order"""
    return [
        EventArchetype(
            kind=EventKind.CHEMISTRY_IMBALANCE,
            name="Chemistry Imbalance",
            description="Coolant chemistry parameters out of spec! Adjust system or face efficiency loss.",
            duration=20000.0,
            params={'ph_shift': 2.0, 'conductivity_shift': 50.0, 'oxygen_shift': 5.0,
                    'ph_tolerance': 1.0, 'conductivity_tolerance': 20.0, 'oxygen_tolerance': 2.0,
                    'efficiency_factor': 0.8, 'penalty': 200_000.0},
            on_start=_chemistry_imbalance_start,
            on_expire=_chemistry_imbalance_expire,
        ),
        EventArchetype(
            kind=EventKind.GRID_ZONE_EMERGENCY,
            name="Grid Zone Emergency",
            description="Critical power needed in Industrial Zone! Maintain 90% output for 30 seconds!",
            duration=30000.0,
            params={'demand': 0.9, 'price_multiplier': 2.0, 'required_output': 0.9,
                    'penalty': 1_000_000.0, 'bonus': 500_000.0},
            on_start=_grid_emergency_start,
            on_expire=_grid_emergency_expire,
        ),
        EventArchetype(
            kind=EventKind.COMPONENT_WEAR_ALERT,
            name="Component Wear Alert",
            description="Multiple components showing excessive wear! Address immediately!",
            duration=25000.0,
            params={'wear_factor': 0.7, 'critical_wear': 50.0, 'efficiency_factor': 0.8,
                    'penalty': 300_000.0},
            on_start=_wear_alert_start,
            on_expire=_wear_alert_expire,
        ),
        EventArchetype(
            kind=EventKind.COOLANT_PUMP_MALFUNCTION,
            name="Coolant Pump Malfunction",
            description="Coolant pump efficiency dropping! Increase coolant flow to compensate!",
            duration=15000.0,
            params={'coolant_efficiency': 0.5},
            on_start=_pump_malfunction_start,
            on_expire=_pump_malfunction_expire,
        ),
        EventArchetype(
            kind=EventKind.POWER_DEMAND_SURGE,
            name="Power Demand Surge",
            description="Grid demanding more power! Increase output to 80% within 20 seconds!",
            duration=20000.0,
            params={'target_output': 0.8, 'required_output': 0.7, 'penalty': 500_000.0},
            on_expire=_demand_surge_expire,
        ),
        EventArchetype(
            kind=EventKind.CONTROL_ROD_SENSOR_GLITCH,
            name="Control Rod Sensor Glitch",
            description="Control rod position sensors malfunctioning! Manual adjustment needed!",
            duration=12000.0,
            params={'noise_amount': 20.0},
            on_start=_sensor_glitch_start,
            on_expire=_sensor_glitch_expire,
        ),
        EventArchetype(
            kind=EventKind.TURBINE_VIBRATION,
            name="Turbine Vibration",
            description="High turbine vibration detected! Reduce RPM or risk damage!",
            duration=15000.0,
            params={'efficiency_factor': 0.7, 'rpm_limit': 0.8, 'health_damage': 30.0},
            on_start=_vibration_start,
            on_expire=_vibration_expire,
        ),
        EventArchetype(
            kind=EventKind.GRID_FREQUENCY_DEVIATION,
            name="Grid Frequency Deviation",
            description="Grid frequency unstable! Maintain exact 50% power output!",
            duration=25000.0,
            params={'target_output': 0.5, 'tolerance': 0.1, 'penalty': 300_000.0},
            on_expire=_frequency_deviation_expire,
        ),
    ]


class EventSystem:
    """
    Scheduler for random plant events

    Each tick active events count down; expired ones run their expiry effect
    and are removed. While fewer than ``max_concurrent`` events are active a
    new one spawns with probability ``spawn_rate`` per simulated second.
    The grid power demand also drifts inside its bounds.
    """

    def __init__(self, config: Optional[EventConfig] = None, rng: Optional[RandomSource] = None,
                 catalog: Optional[List[EventArchetype]] = None,
                 bus: Optional[notifications.PlantEventBus] = None):
        self.config = config if config is not None else EventConfig()
        self.rng = rng if rng is not None else create_random_source()
        self.catalog = catalog if catalog is not None else build_event_catalog()
        self.bus = bus

        self.active_events: List[ActiveEvent] = []
        self.power_demand = self.config.initial_power_demand

    def update(self, reactor: "ReactorCore", turbine: "Turbine", delta_time: float) -> None:
        """
        Tick active events, spawn new ones and drift power demand

        Args:
            reactor: Reactor the effects act on
            turbine: Turbine the effects read or act on
            delta_time: Elapsed time in milliseconds
        """
        seconds = delta_time / 1000.0

        still_active = []
        for event in self.active_events:
            event.time_remaining -= delta_time
            if event.expired:
                self._expire(event, reactor, turbine)
            else:
                still_active.append(event)
        self.active_events = still_active

        spawn_roll = float(self.rng.random())
        if spawn_roll < self.config.spawn_rate * seconds and len(self.active_events) < self.config.max_concurrent:
            self.spawn_random_event(reactor, turbine)

        self.power_demand += centered(self.rng, self.config.power_demand_drift) * seconds
        self.power_demand = max(self.config.min_power_demand,
                                min(self.config.max_power_demand, self.power_demand))

    def spawn_random_event(self, reactor: "ReactorCore", turbine: "Turbine") -> ActiveEvent:
        """Pick an archetype uniformly from the catalog and start it"""
        index = min(int(float(self.rng.random()) * len(self.catalog)), len(self.catalog) - 1)
        return self.start_event(self.catalog[index], reactor, turbine)

    def start_event(self, archetype: EventArchetype, reactor: "ReactorCore",
                    turbine: "Turbine") -> ActiveEvent:
        """
        Start a specific event immediately

        Args:
            archetype: Catalog entry to activate
            reactor: Reactor the start effect acts on
            turbine: Turbine the start effect acts on

        Returns:
            The new ActiveEvent
        """
        event = ActiveEvent(archetype=archetype, time_remaining=archetype.duration)
        archetype.on_start(reactor, turbine, self.rng, archetype.params)
        self.active_events.append(event)

        logger.info("Event started: %s (%.0f s)", archetype.name, archetype.duration / 1000.0)
        if self.bus is not None:
            self.bus.publish(notifications.EVENT_STARTED,
                             {'kind': archetype.kind.value, 'name': archetype.name,
                              'duration': archetype.duration})
        return event

    def _expire(self, event: ActiveEvent, reactor: "ReactorCore", turbine: "Turbine") -> None:
        event.archetype.on_expire(reactor, turbine, self.rng, event.archetype.params)
        logger.info("Event expired: %s", event.name)
        if self.bus is not None:
            self.bus.publish(notifications.EVENT_EXPIRED,
                             {'kind': event.kind.value, 'name': event.name})

    def get_archetype(self, kind: EventKind) -> EventArchetype:
        for archetype in self.catalog:
            if archetype.kind == kind:
                return archetype
        raise KeyError(kind)
