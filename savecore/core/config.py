"""
Persistence configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

MIN_AUTO_SAVE_INTERVAL = 30

_TRUE_VALUES = {"1", "true", "yes", "on"}


class SaveConfig:
    """Configuration for the save framework."""

    ENV_SAVE_DIR = "SAVEGAME_SAVE_DIR"
    ENV_PRETTY_PRINT = "SAVEGAME_PRETTY_PRINT"

    def __init__(
        self,
        save_directory: str | Path | None = None,
        app_name: str = "SaveGame",
        current_version: str = "1.0.0",
        minimum_version: str = "1.0.0",
        auto_save_slot: str = "autosave",
        auto_save_interval: int = 300,
        pretty_print: bool = False,
    ):
        if auto_save_interval < MIN_AUTO_SAVE_INTERVAL:
            raise ValueError(
                f"Auto-save interval must be at least {MIN_AUTO_SAVE_INTERVAL} seconds"
            )
        self.save_directory = Path(save_directory) if save_directory else None
        self.app_name = app_name
        self.current_version = current_version
        self.minimum_version = minimum_version
        self.auto_save_slot = auto_save_slot
        self.auto_save_interval = auto_save_interval
        self.pretty_print = pretty_print

    @classmethod
    def from_env(cls, **overrides) -> SaveConfig:
        """Build a config, letting environment variables fill in unset values."""
        env_dir = os.getenv(cls.ENV_SAVE_DIR, "").strip()
        if env_dir and "save_directory" not in overrides:
            overrides["save_directory"] = env_dir

        env_pretty = os.getenv(cls.ENV_PRETTY_PRINT, "").strip().lower()
        if env_pretty and "pretty_print" not in overrides:
            overrides["pretty_print"] = env_pretty in _TRUE_VALUES

        return cls(**overrides)

    def resolve_save_directory(self) -> Path:
        """Configured save root, or the per-user application data "Saves" folder."""
        if self.save_directory is not None:
            return self.save_directory
        return Path(user_data_dir(self.app_name, appauthor=False)) / "Saves"
