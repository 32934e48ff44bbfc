"""
Save Core

Infrastructure shared by the save/persistence framework:
typed events, the pydantic model base, configuration and cancellation.

Quick Start:
    from savecore import SaveConfig, EventBus

    config = SaveConfig(save_directory="saves", pretty_print=True)
    event_bus = EventBus()
"""

__version__ = "0.1.0"
__author__ = "Developer"

from savecore.core import (
    SaveConfig,
    MIN_AUTO_SAVE_INTERVAL,
    SaveModel,
    EventBus,
    Event,
    CancellationToken,
)

__all__ = [
    "SaveConfig",
    "MIN_AUTO_SAVE_INTERVAL",
    "SaveModel",
    "EventBus",
    "Event",
    "CancellationToken",
]
