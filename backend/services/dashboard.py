"""Dashboard figures and the schedule calendar."""

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from backend.models.course import Course
from backend.models.user import User, UserRole


@dataclass(frozen=True)
class DashboardStats:
    total_courses: int
    total_students: int
    total_revenue: float


def compute_stats(courses: Iterable[Course], actor: User) -> DashboardStats:
    """Summarize the courses an admin oversees, or an instructor teaches."""
    if actor.role == UserRole.ADMIN.value:
        scoped = list(courses)
    else:
        scoped = [course for course in courses if course.instructor_id == actor.id]

    students: set[str] = set()
    revenue = 0.0
    for course in scoped:
        enrolled = course.enrolled_student_ids
        students.update(enrolled)
        revenue += course.price * len(enrolled)

    return DashboardStats(
        total_courses=len(scoped),
        total_students=len(students),
        total_revenue=revenue,
    )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def group_by_day(courses: Iterable[Course], year: int, month: int) -> dict[date, list[Course]]:
    first, last = month_bounds(year, month)
    days: dict[date, list[Course]] = defaultdict(list)
    for course in courses:
        if first <= course.date <= last:
            days[course.date].append(course)
    return dict(sorted(days.items()))
