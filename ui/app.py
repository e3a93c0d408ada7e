"""DayDrain JSON API — exposes the ledger to a rendering layer over HTTP."""

from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from daydrain import Ledger, Settings, day_key, load_settings, save_settings
from daydrain.models import DEFAULT_PRIORITY, INBOX, OVERFLOW
from daydrain.mover import MoveResult

app = FastAPI(title="DayDrain", version="0.1.0")

security = HTTPBasic(auto_error=False)

_ledger: Ledger | None = None


def get_ledger() -> Ledger:
    global _ledger
    if _ledger is None:
        _ledger = Ledger()
    return _ledger


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("DAYDRAIN_USERNAME", "")
    expected_password = os.environ.get("DAYDRAIN_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Helpers ───────────────────────────────────────────────────

def _day(value: Any) -> str:
    try:
        return day_key(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


def _slot(value: str) -> str | int:
    """Slots are addressed by index ('0'..'2') or by label ('Focus 1')."""
    return int(value) if value.isdigit() else value


def _key(value: Any) -> str | int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None or value == "":
        raise HTTPException(status_code=400, detail="Missing item key")
    return str(value)


def _compartment(value: str) -> str:
    if value not in (OVERFLOW, INBOX):
        raise HTTPException(status_code=404, detail=f"Unknown compartment: {value}")
    return value


def _result(result: MoveResult) -> dict[str, Any]:
    return result.to_dict()


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/days/{day}")
def api_get_day(day: str, ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return ledger.day(_day(day)).to_dict()


@app.get("/api/week")
def api_get_week(
    containing: str | None = None,
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Load the ISO week around *containing* (default: today) with its summary."""
    ledger.load_week(_day(containing) if containing else ledger.current_day)
    return {
        "selected": ledger.selected_day,
        "days": [s.to_dict() for s in ledger.week],
        "summary": ledger.summary.to_dict(),
    }


@app.post("/api/days/{day}/focus/{slot}/toggle")
def api_toggle(day: str, slot: str, ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _result(ledger.toggle(_day(day), _slot(slot)))


@app.put("/api/days/{day}/focus/{slot}")
def api_update_focus(
    day: str,
    slot: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Update a Focus slot's text and/or note."""
    key = _day(day)
    result = None
    if "text" in payload:
        result = ledger.update_text(key, _slot(slot), str(payload.get("text") or ""))
        if not result.ok:
            return _result(result)
    if "note" in payload:
        result = ledger.update_note(key, _slot(slot), str(payload.get("note") or ""))
    if result is None:
        raise HTTPException(status_code=400, detail="Expected 'text' or 'note'")
    return _result(result)


@app.delete("/api/days/{day}/focus/{slot}")
def api_clear_focus(day: str, slot: str, ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _result(ledger.clear(_day(day), _slot(slot)))


@app.post("/api/days/{day}/promote")
def api_promote(
    day: str,
    payload: dict[str, Any] = Body(default={}),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Promote an Overflow/Inbox item into Focus; with no key, the next candidate."""
    key = _day(day)
    if "key" not in payload:
        return _result(ledger.promote_next(key))
    return _result(ledger.promote(key, str(payload.get("compartment", OVERFLOW)), _key(payload.get("key"))))


@app.post("/api/days/{day}/demote")
def api_demote(
    day: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    key = _day(day)
    slot = payload.get("slot")
    if slot is None:
        raise HTTPException(status_code=400, detail="Missing slot")
    slot = _slot(str(slot))
    if payload.get("to", OVERFLOW) == INBOX:
        return _result(ledger.demote_to_inbox(key, slot, str(payload.get("priority", DEFAULT_PRIORITY))))
    return _result(ledger.demote_to_overflow(key, slot))


@app.post("/api/days/{day}/transfer")
def api_transfer(
    day: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Move an item between Overflow and Inbox."""
    key = _day(day)
    item = _key(payload.get("key"))
    if payload.get("from") == INBOX:
        return _result(ledger.inbox_to_overflow(key, item))
    return _result(ledger.overflow_to_inbox(key, item, str(payload.get("priority", DEFAULT_PRIORITY))))


@app.post("/api/days/{day}/mood")
def api_log_mood(
    day: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    return _result(ledger.log_mood(_day(day), payload.get("mood")))


@app.post("/api/days/{day}/{compartment}")
def api_add_item(
    day: str,
    compartment: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    key = _day(day)
    text = str(payload.get("text") or "")
    if compartment == OVERFLOW:
        return _result(ledger.add_overflow(key, text))
    if compartment == INBOX:
        return _result(ledger.add_inbox(key, text, str(payload.get("priority", DEFAULT_PRIORITY))))
    raise HTTPException(status_code=404, detail=f"Unknown compartment: {compartment}")


@app.put("/api/days/{day}/{compartment}/{key}")
def api_update_item(
    day: str,
    compartment: str,
    key: str,
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Edit an Overflow/Inbox item: "text" (empty removes it) and/or "priority"."""
    d, comp, item = _day(day), _compartment(compartment), _slot(key)
    result = None
    if "priority" in payload:
        if comp != INBOX:
            raise HTTPException(status_code=400, detail="Only inbox items have a priority")
        result = ledger.set_inbox_priority(d, item, str(payload.get("priority") or ""))
        if not result.ok:
            return _result(result)
    if "text" in payload:
        result = ledger.update_item_text(d, comp, item, str(payload.get("text") or ""))
    if result is None:
        raise HTTPException(status_code=400, detail="Expected 'text' or 'priority'")
    return _result(result)


@app.post("/api/days/{day}/{compartment}/collapse")
def api_set_collapsed(
    day: str,
    compartment: str,
    payload: dict[str, Any] = Body(default={}),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Set the collapsed flag, or flip it when the body has no "collapsed"."""
    d, comp = _day(day), _compartment(compartment)
    if "collapsed" not in payload:
        return _result(ledger.toggle_collapsed(d, comp))
    return _result(ledger.set_collapsed(d, comp, bool(payload.get("collapsed"))))


@app.post("/api/days/{day}/{compartment}/{key}/toggle")
def api_toggle_item(day: str, compartment: str, key: str, ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _result(ledger.toggle_item(_day(day), _compartment(compartment), _slot(key)))


@app.delete("/api/days/{day}/{compartment}/{key}")
def api_remove_item(day: str, compartment: str, key: str, ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _result(ledger.remove_item(_day(day), _compartment(compartment), _slot(key)))


@app.post("/api/move")
def api_move_task(payload: dict[str, Any] = Body(...), ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Reschedule a Focus task onto a later day."""
    slot = payload.get("slot")
    if slot is None:
        raise HTTPException(status_code=400, detail="Missing slot")
    return _result(ledger.move_task(_day(payload.get("from")), _day(payload.get("to")), _slot(str(slot))))


@app.post("/api/drop")
def api_drop(payload: dict[str, Any] = Body(...), ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _result(ledger.handle_drop(str(payload.get("payload", "")), _day(payload.get("target"))))


@app.get("/api/settings")
def api_get_settings(ledger: Ledger = Depends(get_ledger), username: str = Depends(get_current_user)) -> dict[str, Any]:
    return load_settings(ledger.store.root).to_dict()


@app.put("/api/settings")
def api_update_settings(
    payload: dict[str, Any] = Body(...),
    ledger: Ledger = Depends(get_ledger),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Update settings.yaml; the running ledger picks up the new values."""
    root = ledger.store.root
    merged = load_settings(root).to_dict()
    merged.update(payload)
    settings = Settings.from_dict(merged)
    save_settings(settings, root)
    ledger.store.settings = settings
    return {"ok": True, "settings": settings.to_dict()}
