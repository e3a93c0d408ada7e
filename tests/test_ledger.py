"""Tests for daydrain/ledger.py — the facade the UI talks to."""

import pytest

import daydrain.fileio
from daydrain.ledger import (
    ALREADY_DONE,
    INVALID_MOOD,
    INVALID_PAYLOAD,
    NOT_FORWARD,
    STORAGE_ERROR,
    Ledger,
    decode_payload,
    encode_payload,
)
from daydrain.mover import EMPTY_TEXT, NOT_FOUND, OK
from daydrain.models import FocusSlot
from daydrain.store import DayStore

from conftest import TODAY, read_day


WEEK = ["2024-04-29", "2024-04-30", "2024-05-01", "2024-05-02", "2024-05-03", "2024-05-04", "2024-05-05"]


# ── Week and navigation ───────────────────────────────────────


def test_loads_current_week(ledger):
    assert ledger.week_days == WEEK
    assert ledger.selected_day == TODAY
    assert ledger.summary.total == 21
    assert ledger.summary.completed == 0
    assert ledger.summary.average_mood == 4.0


def test_week_carries_unfinished_task_forward(ledger):
    by_day = {s.date: s for s in ledger.week}
    assert not by_day["2024-04-30"].has_focus_content()
    for d in WEEK[3:]:
        assert by_day[d].focus[0] == FocusSlot("Focus 1", "Write report", False, "draft in docs/")
        assert [i.id for i in by_day[d].inbox] == ["in1"]


def test_select_and_step(ledger):
    assert ledger.select("2024-04-29")
    assert not ledger.previous_day()
    assert ledger.next_day()
    assert ledger.selected_day == "2024-04-30"
    assert not ledger.select("2024-05-10")
    assert ledger.selected_day == "2024-04-30"
    ledger.select("2024-05-05")
    assert not ledger.next_day()


def test_load_other_week_selects_its_monday(ledger):
    ledger.load_week("2024-05-08")
    assert ledger.week_days[0] == "2024-05-06"
    assert ledger.selected_day == "2024-05-06"


def test_refresh_for_current_day_rolls_over(workspace):
    clock = [TODAY]
    ledger = Ledger(DayStore(workspace, today=lambda: clock[0]), hooks=False)
    assert not ledger.refresh_for_current_day()

    clock[0] = "2024-05-06"
    assert ledger.refresh_for_current_day()
    assert ledger.current_day == "2024-05-06"
    assert ledger.selected_day == "2024-05-06"
    assert ledger.week_days[0] == "2024-05-06"


# ── Focus slots ───────────────────────────────────────────────


def test_toggle_persists_and_updates_summary(ledger, workspace):
    result = ledger.toggle("2024-05-01", 0)
    assert result.ok
    assert result.snapshot.focus[0].done is True
    assert read_day(workspace, "2024-05-01")["focus"][0]["done"] is True
    assert ledger.summary.completed == 1

    assert ledger.toggle("2024-05-01", "Focus 1").snapshot.focus[0].done is False
    assert ledger.summary.completed == 0


def test_toggle_blank_slot_fails(ledger, workspace):
    result = ledger.toggle("2024-05-01", "Focus 2")
    assert not result.ok
    assert result.reason == EMPTY_TEXT
    assert read_day(workspace, "2024-05-01")["focus"][1]["done"] is False


def test_unknown_slot(ledger):
    assert ledger.toggle("2024-05-01", "Focus 9").reason == NOT_FOUND


def test_clearing_text_resets_slot(ledger):
    ledger.toggle("2024-05-01", 0)
    result = ledger.update_text("2024-05-01", 0, "   ")
    assert result.ok
    assert result.snapshot.focus[0] == FocusSlot("Focus 1")


def test_update_text_truncates(ledger):
    result = ledger.update_text("2024-05-01", "Focus 2", "t" * 100)
    assert result.snapshot.focus[1].text == "t" * 80


def test_update_note(ledger, workspace):
    assert ledger.update_note("2024-05-01", "Focus 2", "orphan").reason == EMPTY_TEXT
    result = ledger.update_note("2024-05-01", "Focus 1", "n" * 250)
    assert result.ok
    assert read_day(workspace, "2024-05-01")["focus"][0]["note"] == "n" * 200


def test_clear(ledger, workspace):
    assert ledger.clear("2024-05-01", 0).ok
    assert read_day(workspace, "2024-05-01")["focus"][0]["text"] == ""


def test_highlight_and_mark_top_incomplete(ledger):
    ledger.update_text("2024-05-01", "Focus 2", "Second")
    ledger.toggle("2024-05-01", "Focus 1")
    assert ledger.highlighted_slot("2024-05-01") == "Focus 2"
    assert ledger.mark_top_incomplete_done("2024-05-01").ok
    assert ledger.day("2024-05-01").focus[1].done is True
    assert not ledger.all_done("2024-05-01")
    assert ledger.mark_top_incomplete_done("2024-05-01").reason == NOT_FOUND
    assert ledger.highlighted_slot("2024-04-29") == "Focus 1"


# ── Mood ──────────────────────────────────────────────────────


def test_log_mood(ledger, workspace):
    assert ledger.log_mood("2024-05-02", 2).ok
    assert read_day(workspace, "2024-05-02")["mood"] == 2
    assert ledger.summary.average_mood == 3.0

    assert ledger.log_mood("2024-05-02", None).ok
    assert read_day(workspace, "2024-05-02")["mood"] is None


@pytest.mark.parametrize("mood", [0, 6, True, "3"])
def test_log_mood_rejects_out_of_range(ledger, mood):
    result = ledger.log_mood("2024-05-01", mood)
    assert result.reason == INVALID_MOOD
    assert ledger.day("2024-05-01").mood == 4


# ── Movement ──────────────────────────────────────────────────


def test_promote_next_prefers_overflow(ledger):
    result = ledger.promote_next("2024-05-01")
    assert result.ok
    assert result.snapshot.focus[1].text == "Call dentist"
    assert result.snapshot.overflow == []

    result = ledger.promote_next("2024-05-01")
    assert result.snapshot.focus[2].text == "Renew passport"
    assert ledger.promote_next("2024-04-29").reason == NOT_FOUND


def test_overflow_to_inbox_with_priority(ledger, workspace):
    result = ledger.overflow_to_inbox("2024-05-01", "ov1", "must")
    assert result.ok
    inbox = read_day(workspace, "2024-05-01")["inbox"]
    assert [(i["text"], i["priority"]) for i in inbox] == [("Call dentist", "must"), ("Renew passport", "nice")]
    assert read_day(workspace, "2024-05-01")["overflow"] == []


def test_inbox_to_overflow(ledger):
    s = ledger.inbox_to_overflow("2024-05-01", "in1").snapshot
    assert [i.text for i in s.overflow] == ["Call dentist", "Renew passport"]
    assert s.ui_state.overflow_collapsed is False


def test_demote_follows_insert_setting(ledger):
    ledger.store.settings.overflow_insert = "prepend"
    s = ledger.demote_to_overflow("2024-05-01", "Focus 1").snapshot
    assert [i.text for i in s.overflow] == ["Write report", "Call dentist"]
    assert s.focus[0].is_blank()


def test_demote_to_inbox(ledger):
    s = ledger.demote_to_inbox("2024-05-01", 0, "must").snapshot
    assert (s.inbox[0].text, s.inbox[0].priority) == ("Write report", "must")


def test_move_task(ledger, workspace):
    ledger.clear("2024-05-04", 0)
    result = ledger.move_task("2024-05-01", "2024-05-04", "Focus 1")
    assert result.ok
    assert result.snapshot.focus[0] == FocusSlot("Focus 1", "Write report", False, "draft in docs/")
    assert result.source.focus[0] == FocusSlot("Focus 1")
    assert read_day(workspace, "2024-05-01")["focus"][0]["text"] == ""

    by_day = {s.date: s for s in ledger.week}
    assert by_day["2024-05-04"].focus[0].text == "Write report"
    assert by_day["2024-05-01"].focus[0].is_blank()


def test_move_task_reasons(ledger):
    assert ledger.move_task("2024-05-01", "2024-05-01", 0).reason == NOT_FORWARD
    assert ledger.move_task("2024-05-02", "2024-05-01", 0).reason == NOT_FORWARD
    assert ledger.move_task("2024-05-01", "2024-05-04", "Focus 2").reason == EMPTY_TEXT
    assert ledger.move_task("2024-05-01", "2024-05-04", 5).reason == NOT_FOUND
    ledger.toggle("2024-05-01", 0)
    assert ledger.move_task("2024-05-01", "2024-05-04", 0).reason == ALREADY_DONE


# ── Item editing ──────────────────────────────────────────────


def test_add_and_edit_items(ledger):
    s = ledger.add_overflow("2024-05-01", "Buy milk").snapshot
    assert s.overflow[-1].text == "Buy milk"
    new_id = s.overflow[-1].id

    assert ledger.toggle_item("2024-05-01", "overflow", new_id).snapshot.overflow[-1].done
    assert ledger.update_item_text("2024-05-01", "overflow", new_id, "Buy oat milk").ok
    assert ledger.remove_item("2024-05-01", "overflow", new_id).ok
    assert [i.id for i in ledger.day("2024-05-01").overflow] == ["ov1"]

    s = ledger.add_inbox("2024-05-01", "Plan trip", "must").snapshot
    assert s.inbox[0].text == "Plan trip"
    assert ledger.set_inbox_priority("2024-05-01", "in1", "must").ok
    assert ledger.add_inbox("2024-05-01", "   ").reason == EMPTY_TEXT


def test_collapsed_state(ledger, workspace):
    assert ledger.toggle_collapsed("2024-05-01", "overflow").ok
    assert read_day(workspace, "2024-05-01")["uiState"]["overflowCollapsed"] is False
    assert ledger.set_collapsed("2024-05-01", "inbox", True).ok
    assert read_day(workspace, "2024-05-01")["uiState"]["inboxCollapsed"] is True
    assert ledger.set_collapsed("2024-05-01", "focus", True).reason == NOT_FOUND


# ── Drag and drop ─────────────────────────────────────────────


def test_payload_round_trip():
    payload = encode_payload("2024-05-01", "overflow", "ov1")
    assert payload == "2024-05-01|overflow|ov1"
    assert decode_payload(payload) == ("2024-05-01", "overflow", "ov1")


def test_legacy_payload_means_focus():
    assert decode_payload("2024-05-01|Focus 2") == ("2024-05-01", "focus", "Focus 2")


@pytest.mark.parametrize("payload", ["", "garbage", "2024-13-01|focus|Focus 1", "2024-05-01|attic|x", "2024-05-01|inbox|"])
def test_bad_payloads(ledger, payload):
    assert decode_payload(payload) is None
    assert ledger.handle_drop(payload, "2024-05-04").reason == INVALID_PAYLOAD


def test_drop_focus_task_on_later_day(ledger):
    ledger.clear("2024-05-04", 0)
    result = ledger.handle_drop(ledger.drag_payload("2024-05-01", "focus", "Focus 1"), "2024-05-04")
    assert result.ok
    assert result.snapshot.focus[0].text == "Write report"


def test_drop_focus_task_on_earlier_day(ledger):
    result = ledger.handle_drop("2024-05-02|Focus 1", "2024-05-01")
    assert result.reason == NOT_FORWARD


def test_drop_overflow_item_on_same_day(ledger):
    result = ledger.handle_drop("2024-05-01|overflow|ov1", "2024-05-01")
    assert result.ok
    assert result.snapshot.focus[1].text == "Call dentist"
    assert result.source is None


def test_drop_overflow_item_on_other_day(ledger, workspace):
    result = ledger.handle_drop("2024-05-01|overflow|ov1", "2024-05-04")
    assert result.ok
    assert result.snapshot.focus[1].text == "Call dentist"
    assert result.source.date == "2024-05-01"
    assert read_day(workspace, "2024-05-01")["overflow"] == []
    assert read_day(workspace, "2024-05-04")["focus"][1]["text"] == "Call dentist"


# ── Subscribers and failures ──────────────────────────────────


def test_subscribe_and_unsubscribe(ledger):
    seen = []
    unsubscribe = ledger.subscribe(lambda s: seen.append(s.date))
    ledger.toggle("2024-05-01", 0)
    assert seen == ["2024-05-01"]
    unsubscribe()
    ledger.toggle("2024-05-01", 0)
    assert seen == ["2024-05-01"]


def test_failing_listener_does_not_break_writes(ledger):
    def boom(snapshot):
        raise RuntimeError("listener bug")

    ledger.subscribe(boom)
    assert ledger.toggle("2024-05-01", 0).ok


def test_storage_error_leaves_state_unchanged(ledger, workspace, monkeypatch):
    def fail(path, content, suffix):
        raise OSError("read-only file system")

    monkeypatch.setattr(daydrain.fileio, "_stage", fail)
    result = ledger.toggle("2024-05-01", 0)
    assert not result.ok
    assert result.reason == STORAGE_ERROR
    assert result.snapshot.focus[0].done is False
    assert ledger.summary.completed == 0
    assert read_day(workspace, "2024-05-01")["focus"][0]["done"] is False
