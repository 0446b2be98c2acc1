"""
Parsing (portal text -> structured objects).

- Grade cells: one line per assessment, scores encoded positionally
- Partial-update responses: payload wrapped in a CDATA section
- Planning events: JSON objects mapped to TimeSlot

Grade line format (one assessment per line):

    QCM [17.00 /20.0(1.0) 20.00 /20.0(1.0) 17.50 /20.0(1.0) ](1.0)

Every decimal number is read left to right. The last one is the assessment
coefficient, the others come in (grade, max grade, coefficient) triples.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Dict, List, Tuple

from ogeportal.errors import GradeParseError, PayloadDecodeError
from ogeportal.logger import get_logger
from ogeportal.model import Assessment, Score, TimeSlot

log = get_logger(__name__)

# Digits, a literal decimal point, digits. Integers ("20") are not numbers here.
NUMBER_PATTERN = re.compile(r"[0-9]+\.[0-9]+")

# A whole coefficient cell: digits with an optional decimal part
COEFFICIENT_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")

CDATA_START = "<![CDATA["
CDATA_END = "]]>"

REQUIRED_EVENT_KEYS = ("id", "title", "start", "end")

_INSTANT_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M%z",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
)


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def tokenize_numbers(line: str) -> List[float]:
    """
    Return every decimal number of `line`, in order of appearance.
    """
    return [float(m) for m in NUMBER_PATTERN.findall(line or "")]


def parse_coefficient(text: str) -> float:
    """
    Parse a coefficient cell ("1.0", " 2.5 ") with the invariant decimal point.
    """
    raw = (text or "").strip()
    if not COEFFICIENT_PATTERN.fullmatch(raw):
        raise GradeParseError(f"Invalid coefficient: {text!r}")
    return float(raw)


# ---------------------------------------------------------------------------
# Grade cell parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def parse_grade_line(line: str) -> Assessment:
    """
    Parse exactly one grade line into one Assessment with its Score children.
    """
    raw = line.strip()
    name = raw.split("[", 1)[0].rstrip()

    numbers = tokenize_numbers(raw)
    if not numbers:
        raise GradeParseError(f"No coefficient found in grade line: {line!r}")

    coefficient = numbers[-1]
    values = numbers[:-1]

    # An incomplete trailing group cannot be a score: drop it
    leftover = len(values) % 3
    if leftover:
        log.warning("Grade line %r: ignoring %d trailing number(s)", raw, leftover)
        values = values[: len(values) - leftover]

    scores = tuple(
        Score(grade=values[i], max_grade=values[i + 1], coefficient=values[i + 2])
        for i in range(0, len(values), 3)
    )
    return Assessment(name=name, coefficient=coefficient, children=scores)


def parse_grades_text(text: str) -> Tuple[Assessment, ...]:
    """
    Parse the whole grade cell of a subject. Empty text means no grades yet.
    """
    return tuple(
        parse_grade_line(line)
        for line in (text or "").split("\n")
        if line.strip()
    )


# ---------------------------------------------------------------------------
# Partial-update responses
# ---------------------------------------------------------------------------


def extract_cdata(body: str) -> str:
    """
    Return the interior of the first CDATA section of a partial-update response.
    """
    start = body.find(CDATA_START)
    if start == -1:
        raise PayloadDecodeError("Response does not contain a CDATA section")
    start += len(CDATA_START)

    end = body.find(CDATA_END, start)
    if end == -1:
        raise PayloadDecodeError("Response CDATA section is not terminated")

    return body[start:end]


def decode_events(payload: str) -> List[Dict[str, Any]]:
    """
    Decode the planning JSON payload and return its `events` array.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise PayloadDecodeError(f"Planning payload is not valid JSON: {e}") from e

    if not isinstance(data, dict) or "events" not in data:
        raise PayloadDecodeError("Planning payload has no 'events' field")

    events = data["events"]
    if not isinstance(events, list):
        raise PayloadDecodeError(f"'events' must be an array, got {type(events).__name__}")

    return events


def parse_instant(value: str) -> datetime:
    """
    Parse an event instant such as "2024-10-07T08:00:00+0200" or "2024-10-07T08:00:00Z".
    """
    raw = str(value).strip()
    for fmt in _INSTANT_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise PayloadDecodeError(f"Invalid event instant: {value!r}")


def slot_from_event(event: Dict[str, Any]) -> TimeSlot:
    """
    Map one planning event object to a TimeSlot. Missing required keys are fatal.
    """
    if not isinstance(event, dict):
        raise PayloadDecodeError(f"Event must be an object, got {type(event).__name__}")

    missing = [key for key in REQUIRED_EVENT_KEYS if key not in event]
    if missing:
        raise PayloadDecodeError(f"Event is missing required key(s): {', '.join(missing)}")

    return TimeSlot(
        id=str(event["id"]),
        title=str(event["title"]),
        start=parse_instant(event["start"]),
        end=parse_instant(event["end"]),
        all_day=bool(event.get("allDay", False)),
        class_name=str(event.get("className") or ""),
        description=str(event.get("description") or ""),
    )
