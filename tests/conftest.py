"""Shared test fixtures for DayDrain tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml

from daydrain.ledger import Ledger
from daydrain.store import DayStore


TODAY = "2024-05-03"  # a Friday; its ISO week runs 2024-04-29 .. 2024-05-05


def day_doc(date: str, focus: list[tuple[str, bool, str]] | None = None, **extra) -> dict:
    """Build a day document the way it is stored on disk."""
    focus = focus or []
    slots = []
    for i in range(3):
        text, done, note = focus[i] if i < len(focus) else ("", False, "")
        slots.append({"label": f"Focus {i + 1}", "text": text, "done": done, "note": note})
    doc = {
        "date": date,
        "focus": slots,
        "overflow": [],
        "inbox": [],
        "mood": None,
        "uiState": {"overflowCollapsed": True, "inboxCollapsed": False},
    }
    doc.update(extra)
    return doc


def write_day(root: Path, doc: dict) -> Path:
    path = root / "days" / f"{doc['date']}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
    return path


def read_day(root: Path, date: str) -> dict:
    return json.loads((root / "days" / f"{date}.json").read_text(encoding="utf-8"))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with settings and one existing day."""
    root = tmp_path / "workspace"
    (root / "days").mkdir(parents=True)

    settings = {"timezone": "UTC", "overflow_insert": "append", "carry_inbox": True}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    write_day(root, day_doc(
        "2024-05-01",
        [("Write report", False, "draft in docs/"), ("", False, ""), ("", False, "")],
        overflow=[{"id": "ov1", "text": "Call dentist", "done": False}],
        inbox=[{"id": "in1", "text": "Renew passport", "priority": "nice", "done": False}],
        mood=4,
    ))

    # Set env var
    os.environ["DAYDRAIN_ROOT"] = str(root)
    yield root
    # Cleanup
    if "DAYDRAIN_ROOT" in os.environ:
        del os.environ["DAYDRAIN_ROOT"]


@pytest.fixture
def store(workspace: Path) -> DayStore:
    return DayStore(workspace, today=lambda: TODAY)


@pytest.fixture
def ledger(store: DayStore) -> Ledger:
    return Ledger(store, hooks=False)
