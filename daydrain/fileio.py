"""Atomic file I/O utilities for DayDrain."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """Read a text file, returning empty string if missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> Any:
    """Read a JSON file, returning empty dict if missing or blank.

    Decode errors propagate; callers decide whether a corrupt file counts
    as absent.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    return json.loads(text)


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file, returning empty dict if missing or empty."""
    text = read_text(path)
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


def dump_json(data: Any) -> str:
    """Pretty, key-sorted JSON so day files stay diffable and hand-editable."""
    return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True) + "\n"


def _stage(path: Path, content: str, suffix: str) -> str:
    """Write *content* to a locked, fsynced temp file beside *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    return temp_path


def _atomic_write(path: Path, content: str, suffix: str = ".tmp") -> None:
    """Atomic write with file locking: temp file + flock + rename."""
    temp_path = _stage(path, content, suffix)
    try:
        os.rename(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: Any) -> None:
    """Atomic JSON write."""
    _atomic_write(path, dump_json(data), suffix=".json")


def write_json_atomic_many(entries: list[tuple[Path, Any]]) -> None:
    """Write several JSON files so that either all of them land or none do.

    Every temp file is staged before the first rename; a staging failure
    removes what was staged and leaves the targets untouched.
    """
    staged: list[tuple[str, Path]] = []
    try:
        for path, data in entries:
            staged.append((_stage(path, dump_json(data), ".json"), path))
    except Exception:
        for temp_path, _ in staged:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
        raise
    for temp_path, path in staged:
        os.rename(temp_path, path)


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Atomic YAML write."""
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")
