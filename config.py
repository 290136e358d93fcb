"""Configuration settings for the taskman application."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKMAN"


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(f"{ENV_PREFIX}_{name}")
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_log_level(name: str, default: str) -> str:
    raw = os.getenv(f"{ENV_PREFIX}_{name}")
    if raw is None or raw.strip() == "":
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return default
    return level


@dataclass
class Config:
    """Application configuration settings.

    Centralized configuration to avoid hardcoded values throughout the codebase.
    """
    # File system
    data_dir: Path = Path("~/.taskman").expanduser()
    storage_file: str = "storage.json"
    task_list_key: str = "task_list"
    log_dir: Optional[Path] = None
    log_level: str = "INFO"

    # Pomodoro
    pomodoro_work_minutes: int = 25
    pomodoro_break_minutes: int = 5
    pomodoro_min_minutes: int = 1
    pomodoro_max_minutes: int = 60
    refresh_interval: float = 1.0  # Seconds between UI polls

    # Display
    datetime_format: str = "%d.%m.%Y %H:%M:%S"
    color_finished: str = "#006400"  # Dark green
    color_in_progress: str = "#893801"  # Burnt orange
    color_not_started: str = "#a0a0a0"  # Grey
    color_primary: str = "#0abdc6"  # Cyan - primary accent
    color_accent: str = "#ff006e"  # Pink - selection highlight
    color_bg_dark: str = "#1a1a2e"  # Dark background
    color_bg_medium: str = "#2d2d44"  # Medium background
    color_text: str = "#e2e8f0"  # Light text

    def __post_init__(self):
        if self.log_dir is None:
            self.log_dir = self.data_dir / "logs"

    def clamp_minutes(self, minutes: int) -> int:
        """Clamp a Pomodoro interval to the configured minute range."""
        return max(self.pomodoro_min_minutes, min(self.pomodoro_max_minutes, minutes))

    @classmethod
    def load(cls) -> 'Config':
        """
        Load configuration.

        Defaults may be overridden with the environment variables
        TASKMAN_DATA_DIR and TASKMAN_LOG_LEVEL. Malformed values fall back
        to the defaults.

        Returns:
            Config instance with default or loaded values
        """
        data_dir = _env_path("DATA_DIR", cls.data_dir)
        return cls(
            data_dir=data_dir,
            log_level=_env_log_level("LOG_LEVEL", cls.log_level),
        )


# Global config instance
config = Config.load()
