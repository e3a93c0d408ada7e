"""Workspace root, settings, timezone and path helpers for DayDrain."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from daydrain.fileio import read_yaml, write_yaml_atomic
from daydrain.models import Settings

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains days/ and today.json)."""
    return Path(
        os.environ.get("DAYDRAIN_ROOT", str(Path.home() / "daydrain"))
    ).expanduser().resolve()


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults when missing or malformed."""
    if root is None:
        root = workspace_root()
    try:
        return Settings.from_dict(read_yaml(settings_path(root)))
    except Exception as e:
        logger.warning("Ignoring unreadable settings file: %s", e)
        return Settings()


def save_settings(settings: Settings, root: Path | None = None) -> None:
    """Save settings back to settings.yaml atomically."""
    write_yaml_atomic(settings_path(root), settings.to_dict())


def get_user_timezone(root: Path | None = None, settings: Settings | None = None) -> ZoneInfo:
    """Get user's timezone from settings.yaml, defaulting to UTC."""
    if settings is None:
        settings = load_settings(root)
    try:
        return ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def today_str(root: Path | None = None, settings: Settings | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    tz = get_user_timezone(root, settings)
    return datetime.now(tz).date().isoformat()


# ── Dates ─────────────────────────────────────────────────────


def day_key(day: str | date) -> str:
    """Normalize a date or ISO string to 'YYYY-MM-DD'. Raises ValueError."""
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(str(day).strip()).isoformat()


def shift_day(day: str | date, days: int) -> str:
    return (date.fromisoformat(day_key(day)) + timedelta(days=days)).isoformat()


def week_bounds(day: str | date) -> tuple[str, str]:
    """ISO week (Monday..Sunday) containing *day*."""
    d = date.fromisoformat(day_key(day))
    start = d - timedelta(days=d.weekday())
    return start.isoformat(), (start + timedelta(days=6)).isoformat()


# ── Path helpers ──────────────────────────────────────────────

def days_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "days"


def day_path(day: str, root: Path | None = None) -> Path:
    return days_dir(root) / f"{day}.json"


def today_alias_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "today.json"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"
