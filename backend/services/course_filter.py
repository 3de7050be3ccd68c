"""Which courses a dashboard or catalog view shows."""

from datetime import date
from typing import Iterable, Sequence

from backend.models.course import Course
from backend.models.user import UserRole

ALL = 'All'
TAB_MINE = 'mine'
TAB_ALL = 'all'
TABS = (TAB_MINE, TAB_ALL)


def _is_unset(value) -> bool:
    return value is None or value == '' or value == ALL


def _as_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def owned_by(course: Course, role: str, actor_id: str) -> bool:
    if role == UserRole.STUDENT.value:
        return actor_id in course.enrolled_student_ids
    return course.instructor_id == actor_id


def filter_courses(
    courses: Iterable[Course],
    role: str,
    actor_id: str,
    active_tab: str,
    category: str | None = ALL,
    instructor_id: str | None = ALL,
    date_start: date | str | None = None,
    date_end: date | str | None = None,
) -> list[Course]:
    """Return the courses a dashboard tab displays, in store order.

    Every filter narrows the result; an unset filter (``'All'``, ``''`` or
    ``None``) matches everything.
    """
    if active_tab not in TABS:
        raise ValueError(f'Unknown tab: {active_tab!r}')

    start = None if _is_unset(date_start) else _as_date(date_start)
    end = None if _is_unset(date_end) else _as_date(date_end)

    displayed: list[Course] = []
    for course in courses:
        if active_tab == TAB_MINE and not owned_by(course, role, actor_id):
            continue
        if not _is_unset(category) and course.category != category:
            continue
        if not _is_unset(instructor_id) and course.instructor_id != instructor_id:
            continue
        if start is not None and course.date < start:
            continue
        if end is not None and course.date > end:
            continue
        displayed.append(course)

    return displayed


def search_courses(courses: Sequence[Course], query: str | None) -> list[Course]:
    needle = (query or '').strip().lower()
    if not needle:
        return list(courses)
    return [
        course for course in courses
        if needle in course.title.lower() or needle in (course.category or '').lower()
    ]
