"""Weekly completion and mood summary, derived from day snapshots."""

from __future__ import annotations

from daydrain.models import DayBreakdown, DaySnapshot, WeekSummary


def summarize(snapshots: list[DaySnapshot]) -> WeekSummary:
    """Aggregate Focus completion and average mood over *snapshots*.

    Only Focus slots count toward completion.
    """
    per_day = []
    for s in sorted(snapshots, key=lambda s: s.date):
        per_day.append(DayBreakdown(
            date=s.date,
            completed=sum(1 for t in s.focus if t.done),
            total=len(s.focus),
            mood=s.mood,
        ))
    moods = [d.mood for d in per_day if d.mood is not None]
    return WeekSummary(
        completed=sum(d.completed for d in per_day),
        total=sum(d.total for d in per_day),
        average_mood=sum(moods) / len(moods) if moods else None,
        per_day=per_day,
    )
