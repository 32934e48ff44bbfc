"""
Core infrastructure module.

Provides:
- SaveModel: pydantic base for every persisted record
- EventBus: typed publish/subscribe messaging
- SaveConfig: persistence configuration
- CancellationToken: cooperative cancellation for I/O work
"""

from savecore.core.model import SaveModel
from savecore.core.events import EventBus, Event, EventHandler
from savecore.core.config import SaveConfig, MIN_AUTO_SAVE_INTERVAL
from savecore.core.cancellation import CancellationToken

__all__ = [
    "SaveModel",
    "EventBus",
    "Event",
    "EventHandler",
    "SaveConfig",
    "MIN_AUTO_SAVE_INTERVAL",
    "CancellationToken",
]
