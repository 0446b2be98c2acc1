"""
ogeportal: grades and planning retrieval for the OGE student portal.
"""

from ogeportal.grades import build_grade_tree, get_grades
from ogeportal.model import Aggregate, Assessment, GradeEntry, Schedule, Score, TimeSlot
from ogeportal.schedule import get_schedule, get_week_schedule
from ogeportal.scrape import Portal

__all__ = [
    "Aggregate",
    "Assessment",
    "GradeEntry",
    "Portal",
    "Schedule",
    "Score",
    "TimeSlot",
    "build_grade_tree",
    "get_grades",
    "get_schedule",
    "get_week_schedule",
]
