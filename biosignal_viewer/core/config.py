"""
Configuration and logging setup for the Biosignal Viewer application.

Settings are resolved in this order, later sources winning:
1. Defaults
2. JSON config file (explicit path, $BIOSIGNAL_VIEWER_CONFIG, or
   ~/.biosignal_viewer/config.json)
3. Environment variables
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


CONFIG_ENV_VAR = "BIOSIGNAL_VIEWER_CONFIG"
LOG_LEVEL_ENV_VAR = "BIOSIGNAL_VIEWER_LOG_LEVEL"
DEFAULT_CONFIG_PATH = Path.home() / ".biosignal_viewer" / "config.json"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ViewerSettings:
    """User-adjustable viewer settings."""
    log_level: str = "INFO"
    line_width: float = 2.0
    marker_radius: float = 5.0
    poll_interval_ms: int = 16      # Ingestion queue poll, about once per frame
    min_grid_spacing_px: float = 6.0
    antialias: bool = True
    background: str = "#1e1e1e"
    window_width: int = 1400
    window_height: int = 900
    show_demo_channels: bool = False

    def validate(self) -> list[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if str(self.log_level).upper() not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of {VALID_LOG_LEVELS}")
        if not self.line_width > 0:
            errors.append("line_width must be positive")
        if not self.marker_radius > 0:
            errors.append("marker_radius must be positive")
        if not isinstance(self.poll_interval_ms, int) or self.poll_interval_ms < 1:
            errors.append("poll_interval_ms must be an integer >= 1")
        if not self.min_grid_spacing_px > 0:
            errors.append("min_grid_spacing_px must be positive")
        if not isinstance(self.window_width, int) or self.window_width < 400:
            errors.append("window_width must be an integer >= 400")
        if not isinstance(self.window_height, int) or self.window_height < 300:
            errors.append("window_height must be an integer >= 300")
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ViewerSettings:
        """Deserialize from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def _reset_invalid(settings: ViewerSettings) -> ViewerSettings:
    """Replace fields that fail validation with their defaults."""
    defaults = ViewerSettings()
    for f in fields(settings):
        candidate = ViewerSettings(**{**defaults.to_dict(), f.name: getattr(settings, f.name)})
        try:
            invalid = bool(candidate.validate())
        except TypeError:
            invalid = True
        if invalid:
            logger.warning(f"Invalid setting {f.name}={getattr(settings, f.name)!r}, using default")
            setattr(settings, f.name, getattr(defaults, f.name))
    return settings


def load_settings(path: Optional[Path | str] = None) -> ViewerSettings:
    """
    Load settings from a JSON file and the environment.

    A missing or unreadable file leaves the defaults in place.

    Args:
        path: Config file; falls back to $BIOSIGNAL_VIEWER_CONFIG, then
            ~/.biosignal_viewer/config.json
    """
    settings = ViewerSettings()

    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    path = Path(path)

    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            settings = ViewerSettings.from_dict(data)
            logger.debug(f"Loaded settings from {path}")
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not load settings from {path}: {e}")
    else:
        logger.debug(f"Config file not found: {path}")

    log_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if log_level:
        settings.log_level = log_level.upper()

    settings.log_level = str(settings.log_level).upper()
    return _reset_invalid(settings)


def save_settings(settings: ViewerSettings, path: Path | str) -> None:
    """Write settings to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the application."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
