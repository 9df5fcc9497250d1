"""
Plant Systems

Physical, economic and event models of the plant:
- Turbine: steam to shaft speed and electrical output
- ReactorCore: fission, thermal and coolant dynamics, overdrive, damage
- EventSystem: random timed modifiers
- FinancialEngine: revenue, operating cost and wear
- PlantEventBus: transition notifications for collaborators
"""

from .events import ActiveEvent, EventArchetype, EventKind, EventSystem, build_event_catalog
from .financials import FinancialEngine, FinancialReport
from .notifications import PlantEventBus, PlantNotification
from .reactor_core import CoolantChemistry, FuelRod, LedgerEntry, ReactorCore, SteamParticle
from .turbine import Turbine

__all__ = [
    'Turbine',
    'ReactorCore',
    'FuelRod',
    'CoolantChemistry',
    'SteamParticle',
    'LedgerEntry',
    'EventSystem',
    'EventKind',
    'EventArchetype',
    'ActiveEvent',
    'build_event_catalog',
    'FinancialEngine',
    'FinancialReport',
    'PlantEventBus',
    'PlantNotification',
]
