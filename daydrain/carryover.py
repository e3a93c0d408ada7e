"""Carry unfinished Focus work into a newly created day."""

from __future__ import annotations

import copy
import logging

from daydrain.models import FOCUS_NOTE_LIMIT, FOCUS_TEXT_LIMIT, DaySnapshot, InboxItem
from daydrain.sanitize import clip

logger = logging.getLogger(__name__)


def carry_candidates(previous: DaySnapshot) -> list[tuple[str, str]]:
    """(text, note) of every not-done, non-blank Focus slot, in label order."""
    out = []
    for slot in previous.focus:
        if slot.done:
            continue
        text = clip(slot.text, FOCUS_TEXT_LIMIT)
        if text:
            out.append((text, (slot.note or "")[:FOCUS_NOTE_LIMIT]))
    return out


def apply(previous: DaySnapshot | None, new: DaySnapshot, carry_inbox: bool = True) -> DaySnapshot:
    """Seed *new* with yesterday's unfinished Focus tasks.

    Candidates fill the empty slots of *new* in order; once its slots are
    full the remaining candidates are dropped. A day that already has any
    Focus content is returned unchanged, so seeding can never happen twice.
    With *carry_inbox*, not-done Inbox items also move forward, keeping
    their ids.
    """
    result = copy.deepcopy(new)
    if previous is None or result.has_focus_content():
        return result

    candidates = carry_candidates(previous)
    empty = [slot for slot in result.focus if slot.is_blank()]
    for slot, (text, note) in zip(empty, candidates):
        slot.text = text
        slot.note = note
        slot.done = False
    dropped = len(candidates) - len(empty)
    if dropped > 0:
        logger.info("Carry-over into %s dropped %d task(s): no empty Focus slot", result.date, dropped)

    if carry_inbox and not result.inbox:
        result.inbox = [
            InboxItem(text=item.text, priority=item.priority, done=False, id=item.id)
            for item in previous.inbox
            if not item.done
        ]
    return result
