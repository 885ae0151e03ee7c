"""Workspace root, settings, clock and logging setup for Habitify."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from habitify.fileio import read_yaml
from habitify.models import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def workspace_root() -> Path:
    """Get the workspace directory holding habits.yaml and settings.yaml."""
    return Path(
        os.environ.get("HABITIFY_ROOT", str(Path.home() / "habitify"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def habits_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "habits.yaml"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


# ── Settings ──────────────────────────────────────────────────

def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults when it is missing or unreadable."""
    try:
        return Settings.from_dict(read_yaml(settings_path(root)))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("using default settings: %s", e)
        return Settings()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Timezone that decides what 'today' is, defaulting to UTC."""
    name = load_settings(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown timezone %r in settings, using UTC", name)
        return ZoneInfo("UTC")


# ── Clock ─────────────────────────────────────────────────────

def now_local(root: Path | None = None) -> datetime:
    """Current wall-clock time in the user's timezone, as a naive datetime."""
    return datetime.now(get_user_timezone(root)).replace(tzinfo=None)


def today_local(root: Path | None = None) -> date:
    """Today's calendar day in the user's timezone."""
    return now_local(root).date()


# ── Logging ───────────────────────────────────────────────────

def configure_logging(
    root: Path | None = None,
    level: str | None = None,
    handlers: list[logging.Handler] | None = None,
) -> None:
    """Set up root logging for the CLI and web entry points.

    Level precedence: explicit argument, HABITIFY_LOG_LEVEL, settings.yaml.
    """
    name = level or os.environ.get("HABITIFY_LOG_LEVEL") or load_settings(root).log_level
    numeric = logging.getLevelName(str(name).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, handlers=handlers)
    logging.getLogger("habitify").setLevel(numeric)
