"""Enrollment rules: who may take a seat in a course, and when."""

import enum
import logging

from backend.core.errors import CourseFull, CourseNotFound, RoleNotPermitted, Unauthenticated
from backend.models.user import User, UserRole
from backend.store import EnrollmentWrite, RecordStore

logger = logging.getLogger(__name__)


class EnrollmentOutcome(str, enum.Enum):
    ENROLLED = 'enrolled'
    ALREADY_ENROLLED = 'already_enrolled'


def enroll(store: RecordStore, course_id: str, user: User | None) -> EnrollmentOutcome:
    """Enroll ``user`` in the course or explain why not.

    Raises ``Unauthenticated``, ``RoleNotPermitted``, ``CourseNotFound`` or
    ``CourseFull``; in each case the course is left untouched. Enrolling a
    student who already holds a seat is a no-op.
    """
    if user is None:
        raise Unauthenticated()

    if user.role != UserRole.STUDENT.value:
        raise RoleNotPermitted('Only students can enroll in courses.')

    course = store.get_course(course_id)
    if course is None:
        raise CourseNotFound()

    if store.is_enrolled(course_id, user.id):
        return EnrollmentOutcome.ALREADY_ENROLLED

    write = store.append_enrollment_if_capacity(course_id, user.id)

    if write is EnrollmentWrite.FULL:
        logger.info('Enrollment refused: course %s is full (student %s).', course_id, user.id)
        raise CourseFull()
    if write is EnrollmentWrite.MISSING:
        raise CourseNotFound()
    if write is EnrollmentWrite.DUPLICATE:
        return EnrollmentOutcome.ALREADY_ENROLLED

    logger.info('Student %s enrolled in course %s.', user.id, course_id)
    return EnrollmentOutcome.ENROLLED
