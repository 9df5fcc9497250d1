"""
Game layer: the session driver and collaborator-facing helpers.
"""

from .ambient import AmbientChange, AmbientSoundTracker
from .session import PlantSession, PlantSnapshot, PlantStatus

__all__ = [
    'PlantSession',
    'PlantSnapshot',
    'PlantStatus',
    'AmbientSoundTracker',
    'AmbientChange',
]
