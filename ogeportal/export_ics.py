"""
iCalendar (.ics) export.

We convert the time slots of a schedule into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from ogeportal.model import Schedule


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _ics_datetime(value: datetime) -> str:
    """
    UTC 'YYYYMMDDTHHMMSSZ' for aware instants, floating local time otherwise.
    """
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return value.strftime("%Y%m%dT%H%M%S")


def export_schedule_to_ics(schedule: Schedule, out_path: str | Path) -> int:
    """
    Export the slots of `schedule` to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//ogeportal//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    count = 0
    for slot in schedule.slots:
        summary = slot.title.strip() or "OGE"
        uid = slot.id.strip() or f"{_ics_datetime(slot.start)}@ogeportal"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(uid)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        if slot.all_day:
            lines.append(f"DTSTART;VALUE=DATE:{slot.start.strftime('%Y%m%d')}")
            lines.append(f"DTEND;VALUE=DATE:{slot.end.strftime('%Y%m%d')}")
        else:
            lines.append(f"DTSTART:{_ics_datetime(slot.start)}")
            lines.append(f"DTEND:{_ics_datetime(slot.end)}")
        lines.append(f"SUMMARY:{_ics_escape(summary)}")
        if slot.class_name.strip():
            lines.append(f"CATEGORIES:{_ics_escape(slot.class_name.strip())}")
        if slot.description.strip():
            lines.append(f"DESCRIPTION:{_ics_escape(slot.description.strip())}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
