"""
Ambient sound level tracking.

The audio layer loops a reactor hum and a turbine whine whose intensity
follows the plant. Levels are recomputed every frame but only reported
when they change, so the player hears a switch only on real transitions.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..systems import notifications
from ..systems.reactor_core import ReactorCore
from ..systems.turbine import Turbine

REACTOR_HUM = "reactor_hum"
TURBINE_WHINE = "turbine_whine"


@dataclass
class AmbientChange:
    channel: str
    level: str
    previous: Optional[str]


def reactor_hum_level(reactor: ReactorCore) -> str:
    power_ratio = reactor.power_output / reactor.max_power
    if reactor.overdrive_active or power_ratio > 0.66:
        return "high"
    elif power_ratio > 0.33:
        return "medium"
    return "low"


def turbine_whine_level(turbine: Turbine) -> str:
    return "high" if turbine.rpm / turbine.max_rpm >= 0.5 else "low"


class AmbientSoundTracker:
    """Tracks the discrete ambient levels and reports changes"""

    def __init__(self, bus: Optional[notifications.PlantEventBus] = None):
        self.bus = bus
        self.levels = {REACTOR_HUM: None, TURBINE_WHINE: None}

    def update(self, reactor: ReactorCore, turbine: Turbine) -> List[AmbientChange]:
        """
        Recompute levels

        Returns:
            Channels whose level changed this frame
        """
        changes = []
        for channel, level in ((REACTOR_HUM, reactor_hum_level(reactor)),
                               (TURBINE_WHINE, turbine_whine_level(turbine))):
            previous = self.levels[channel]
            if level != previous:
                self.levels[channel] = level
                change = AmbientChange(channel=channel, level=level, previous=previous)
                changes.append(change)
                if self.bus is not None:
                    self.bus.publish(notifications.AMBIENT_LEVEL_CHANGED,
                                     {'channel': channel, 'level': level, 'previous': previous})
        return changes
