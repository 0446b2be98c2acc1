"""
JSON output of retrieved grades and schedules.

Results are never read back: every retrieval starts from the portal again.
These helpers only give the CLI (and scripts) a stable JSON shape:

    Aggregate / Assessment -> {"name", "coefficient", "children"}
    Score                  -> {"grade", "max_grade", "coefficient"}
    Schedule               -> {"start", "end", "slots": [...]}
"""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Union

from ogeportal.model import GradeEntry, Schedule, Score, TimeSlot


def _iso(value: Union[date, datetime]) -> str:
    return value.isoformat()


def grade_entry_to_dict(entry: GradeEntry) -> Dict[str, Any]:
    """
    Convert a grade tree (or subtree) to nested dicts, children in order.
    """
    if isinstance(entry, Score):
        return {
            "grade": entry.grade,
            "max_grade": entry.max_grade,
            "coefficient": entry.coefficient,
        }
    return {
        "name": entry.name,
        "coefficient": entry.coefficient,
        "children": [grade_entry_to_dict(child) for child in entry.children],
    }


def time_slot_to_dict(slot: TimeSlot) -> Dict[str, Any]:
    return {
        "id": slot.id,
        "title": slot.title,
        "start": _iso(slot.start),
        "end": _iso(slot.end),
        "all_day": slot.all_day,
        "class_name": slot.class_name,
        "description": slot.description,
    }


def schedule_to_dict(schedule: Schedule) -> Dict[str, Any]:
    return {
        "start": _iso(schedule.start),
        "end": _iso(schedule.end),
        "slots": [time_slot_to_dict(slot) for slot in schedule.slots],
    }


def write_json(data: Any, path: Union[str, Path]) -> Path:
    """
    Write `data` as pretty JSON, creating parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return out
