"""
Central data model definitions used across the project.

Grades form a tree of three node kinds:
- Aggregate: a folder, semester or subject row of the grades table
- Assessment: one graded activity of a subject (e.g. a quiz)
- Score: one grade / max grade / coefficient triple of an assessment

The schedule is a flat, ordered list of TimeSlot objects.

All objects are frozen: a retrieval builds a new tree or schedule, never updates an old one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterator, Optional, Tuple, Union

ROOT_NAME = "Root"


@dataclass(frozen=True)
class Score:
    """
    One individual grade inside an assessment, e.g. "17.00 /20.0(1.0)".
    """

    grade: float
    max_grade: float
    coefficient: float

    @property
    def children(self) -> Tuple[()]:
        return ()


@dataclass(frozen=True)
class Assessment:
    """
    One line of a subject's grade cell: a name, its own coefficient and its scores.
    """

    name: str
    coefficient: float
    children: Tuple[Score, ...] = ()


@dataclass(frozen=True)
class Aggregate:
    """
    A row of the grades table: a folder (semester, teaching unit) or a subject.

    Folder children are Aggregates, subject children are Assessments.
    """

    name: str
    coefficient: float
    children: Tuple["GradeEntry", ...] = ()

    def find(self, name: str) -> Optional["GradeEntry"]:
        """Return the first direct child called `name`, or None."""
        for child in self.children:
            if getattr(child, "name", None) == name:
                return child
        return None


GradeEntry = Union[Aggregate, Assessment, Score]


def walk(entry: GradeEntry) -> Iterator[GradeEntry]:
    """Depth-first, document-order traversal starting with `entry` itself."""
    yield entry
    for child in entry.children:
        yield from walk(child)


@dataclass(frozen=True)
class TimeSlot:
    """
    One calendar event of the planning, mapped field by field from the portal's event object.

    The portal sends no separate subject or room keys: they stay inside `title`
    (e.g. "CM\\nAlgorithmique\\nAmphi A"). The slot type is `class_name`.
    """

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    class_name: str = ""
    description: str = ""


@dataclass(frozen=True)
class Schedule:
    """
    Time slots returned for the requested range, in the order the portal sent them.
    """

    start: Union[date, datetime]
    end: Union[date, datetime]
    slots: Tuple[TimeSlot, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(self.slots)
