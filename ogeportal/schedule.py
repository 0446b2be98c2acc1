"""
Planning extraction.

The planning widget loads its events with one AJAX request carrying the
displayed range. The portal only looks at the day part of both bounds: every
slot of every day in [start, end] is returned whatever the time of day given.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Optional, Tuple, Union

from ogeportal.logger import get_logger
from ogeportal.model import Schedule
from ogeportal.parse import decode_events, extract_cdata, slot_from_event
from ogeportal.scrape import Portal

log = get_logger(__name__)

PLANNING_ID = "mainFormPlanning:edt"
BOUND_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

Day = Union[date, datetime]


def format_bound(value: Day) -> str:
    """
    Format a range bound the way the planning's date parser expects it.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    return value.strftime(BOUND_FORMAT)


def schedule_form(start: Day, end: Day) -> Dict[str, str]:
    """
    Form fields of the AJAX request that loads the events of [start, end].
    """
    return {
        "javax.faces.partial.ajax": "true",
        "javax.faces.partial.render": PLANNING_ID,
        PLANNING_ID: PLANNING_ID,
        f"{PLANNING_ID}_start": format_bound(start),
        f"{PLANNING_ID}_end": format_bound(end),
    }


def parse_schedule_response(body: str, start: Day, end: Day) -> Schedule:
    """
    Turn the planning partial-update response into a Schedule (one slot per event).
    """
    events = decode_events(extract_cdata(body))
    slots = tuple(slot_from_event(event) for event in events)
    return Schedule(start=start, end=end, slots=slots)


def week_bounds(day: Day) -> Tuple[date, date]:
    """
    Return (monday, sunday) of the week containing `day`.
    """
    if isinstance(day, datetime):
        day = day.date()
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_schedule(portal: Portal, start: Optional[Day] = None, end: Optional[Day] = None) -> Schedule:
    """
    Return every time slot between `start` and `end` (inclusive days).

    Defaults: `start` is today, `end` is `start` (a single day).
    """
    if start is None:
        start = date.today()
    if end is None:
        end = start

    # The planning view must be opened before its AJAX endpoint answers
    portal.navigate(portal.schedule_url)
    body = portal.post_form(portal.schedule_url, schedule_form(start, end))

    schedule = parse_schedule_response(body, start, end)
    log.info("Schedule %s -> %s: %d slot(s)", format_bound(start), format_bound(end), len(schedule))
    return schedule


def get_week_schedule(portal: Portal, day: Optional[Day] = None) -> Schedule:
    """
    Return the schedule of the whole week (Monday to Sunday) containing `day` (default: today).
    """
    monday, sunday = week_bounds(day if day is not None else date.today())
    return get_schedule(portal, monday, sunday)
