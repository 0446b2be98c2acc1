"""
CLI (Command Line Interface).

Terminal commands on top of the library, e.g.:

    ogeportal grades [--json grades.json]
    ogeportal schedule [--start 2024-10-07] [--end 2024-10-11] [--json planning.json]
    ogeportal week [--day 2024-10-09]
    ogeportal export <file.ics> [--start ...] [--end ...]

The portal session is taken from the environment / .env file (see ogeportal.config).
"""

from __future__ import annotations

import argparse
from datetime import date
from typing import Optional

import requests
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ogeportal.config import load_settings
from ogeportal.errors import OgeError
from ogeportal.export_ics import export_schedule_to_ics
from ogeportal.grades import get_grades
from ogeportal.model import Aggregate, Assessment, GradeEntry, Schedule, Score
from ogeportal.schedule import get_schedule, get_week_schedule
from ogeportal.scrape import Portal
from ogeportal.storage import grade_entry_to_dict, schedule_to_dict, write_json

console = Console()


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def _label(entry: GradeEntry) -> str:
    if isinstance(entry, Score):
        return f"{entry.grade:g} / {entry.max_grade:g}  (coef {entry.coefficient:g})"
    if isinstance(entry, Assessment):
        return f"[italic]{escape(entry.name)}[/italic]  (coef {entry.coefficient:g})"
    return f"[bold]{escape(entry.name)}[/bold]  (coef {entry.coefficient:g})"


def _add_branch(tree: Tree, entry: GradeEntry) -> None:
    branch = tree.add(_label(entry))
    for child in entry.children:
        _add_branch(branch, child)


def render_grades(root: Aggregate) -> Tree:
    tree = Tree(f"[bold]{root.name}[/bold]")
    for child in root.children:
        _add_branch(tree, child)
    return tree


def render_schedule(schedule: Schedule) -> Table:
    table = Table(
        title=f"{schedule.start.isoformat()} -> {schedule.end.isoformat()}",
        box=box.SIMPLE,
    )
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Title")
    table.add_column("Type")

    for slot in schedule.slots:
        hours = "all day" if slot.all_day else f"{slot.start:%H:%M}-{slot.end:%H:%M}"
        table.add_row(f"{slot.start:%a %d.%m}", hours, escape(slot.title), escape(slot.class_name))
    return table


def _portal() -> Portal:
    return Portal.from_settings(load_settings())


def _cmd_grades(args: argparse.Namespace) -> int:
    """
    Retrieve the whole grade tree, print it and optionally save it as JSON.
    """
    root = get_grades(_portal())
    console.print(render_grades(root))

    if args.json:
        out = write_json(grade_entry_to_dict(root), args.json)
        print(f"Grades written to: {out}")
    return 0


def _cmd_schedule(args: argparse.Namespace, schedule: Schedule) -> int:
    """
    Print a retrieved schedule and optionally save it as JSON.
    """
    if not schedule.slots:
        print("No time slots in this range.")
    else:
        console.print(render_schedule(schedule))

    if args.json:
        out = write_json(schedule_to_dict(schedule), args.json)
        print(f"Schedule written to: {out}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export the time slots of a range into an iCalendar (.ics) file.
    """
    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .ics path.")
        return 1

    schedule = get_schedule(_portal(), args.start, args.end)
    n = export_schedule_to_ics(schedule, out_path)
    print(f"Exported {n} time slots to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="ogeportal", description="OGE grades & planning")
    sub = parser.add_subparsers(dest="command", required=True)

    p_grades = sub.add_parser("grades", help="Show the grade tree")
    p_grades.add_argument("--json", type=str, help="Also write the tree to this JSON file")

    p_schedule = sub.add_parser("schedule", help="Show the time slots of a date range")
    p_schedule.add_argument("--start", type=_parse_day, help="First day (YYYY-MM-DD, default: today)")
    p_schedule.add_argument("--end", type=_parse_day, help="Last day (YYYY-MM-DD, default: start)")
    p_schedule.add_argument("--json", type=str, help="Also write the schedule to this JSON file")

    p_week = sub.add_parser("week", help="Show the time slots of a whole week")
    p_week.add_argument("--day", type=_parse_day, help="Any day of the week (default: today)")
    p_week.add_argument("--json", type=str, help="Also write the schedule to this JSON file")

    p_export = sub.add_parser("export", help="Export time slots to .ics")
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")
    p_export.add_argument("--start", type=_parse_day, help="First day (YYYY-MM-DD, default: today)")
    p_export.add_argument("--end", type=_parse_day, help="Last day (YYYY-MM-DD, default: start)")

    return parser


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "grades":
        return _cmd_grades(args)
    if args.command == "schedule":
        return _cmd_schedule(args, get_schedule(_portal(), args.start, args.end))
    if args.command == "week":
        return _cmd_schedule(args, get_week_schedule(_portal(), args.day))
    if args.command == "export":
        return _cmd_export(args)
    return 2


def main(argv: Optional[list[str]] = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        code = _dispatch(args)
    except (OgeError, requests.RequestException) as e:
        print(f"Error: {e}")
        code = 1

    raise SystemExit(code)
