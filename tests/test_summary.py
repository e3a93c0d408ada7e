"""Tests for daydrain/summary.py — weekly completion and mood."""

from daydrain.models import DaySnapshot, FocusSlot, OverflowItem
from daydrain.summary import summarize


def _day(date, done=0, mood=None):
    s = DaySnapshot(date=date, mood=mood)
    for i in range(done):
        s.focus[i] = FocusSlot(s.focus[i].label, f"task {i}", True)
    return s


def test_empty_week():
    summary = summarize([])
    assert summary.completed == 0
    assert summary.total == 0
    assert summary.average_mood is None
    assert summary.completion_text == "No focus tasks logged this week"


def test_counts_focus_slots_only():
    day = _day("2024-05-01", done=2)
    day.overflow = [OverflowItem("done elsewhere", True, "ov1")]
    summary = summarize([day, _day("2024-05-02")])
    assert summary.completed == 2
    assert summary.total == 6
    assert summary.completion_text == "2 / 6 tasks completed this week"


def test_average_mood_ignores_missing():
    summary = summarize([_day("2024-05-01", mood=4), _day("2024-05-02"), _day("2024-05-03", mood=5)])
    assert summary.average_mood == 4.5
    assert summary.average_mood_emoji == "😄"


def test_no_moods_means_no_average():
    summary = summarize([_day("2024-05-01", done=1), _day("2024-05-02")])
    assert summary.average_mood is None
    assert summary.to_dict()["averageMood"] is None


def test_per_day_sorted():
    summary = summarize([_day("2024-05-03", done=3, mood=2), _day("2024-05-01", done=1)])
    assert [(d.date, d.completed, d.total, d.mood) for d in summary.per_day] == [
        ("2024-05-01", 1, 3, None),
        ("2024-05-03", 3, 3, 2),
    ]
