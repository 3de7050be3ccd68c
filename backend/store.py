"""Record store for users, courses and enrollments.

Every read and write the services perform goes through a ``RecordStore``
bound to one SQLAlchemy session. The store validates references on the way
in and owns the one conditional write the marketplace depends on: appending
a student to a course only while a seat is free.
"""

import enum
import logging
from typing import Iterable

from fastapi import Depends
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core.errors import EmailAlreadyRegistered, FieldValidationError, ReferentialIntegrityError
from backend.database import get_db
from backend.models.course import Course, Enrollment
from backend.models.user import COURSE_MANAGER_ROLES, User, UserRole

logger = logging.getLogger(__name__)

EDITABLE_COURSE_FIELDS = frozenset({'title', 'description', 'date', 'price', 'category', 'image_url'})


class EnrollmentWrite(str, enum.Enum):
    APPENDED = 'appended'
    DUPLICATE = 'duplicate'
    FULL = 'full'
    MISSING = 'missing'


class RecordStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    # Users

    def get_user(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def find_user_by_email(self, email: str) -> User | None:
        normalized = email.strip().lower()
        return self.db.query(User).filter(User.email == normalized).first()

    def list_users(self, role: str | None = None) -> list[User]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.name.asc(), User.id.asc()).all()

    def insert_user(self, user: User) -> User:
        user.email = user.email.strip().lower()
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise EmailAlreadyRegistered() from exc
        self.db.refresh(user)
        return user

    # Courses

    def get_course(self, course_id: str) -> Course | None:
        return self.db.get(Course, course_id)

    def list_courses(self, instructor_id: str | None = None, category: str | None = None) -> list[Course]:
        query = self.db.query(Course)
        if instructor_id:
            query = query.filter(Course.instructor_id == instructor_id)
        if category:
            query = query.filter(Course.category == category)
        return query.order_by(Course.position.asc(), Course.id.asc()).all()

    def insert_course(self, course: Course) -> Course:
        self._check_course_references(course)
        course.position = self._next_course_position()
        course.enrolled_count = len(course.enrollments)
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        return course

    def update_course(self, course_id: str, **fields) -> Course | None:
        unknown = set(fields) - EDITABLE_COURSE_FIELDS
        if unknown:
            raise FieldValidationError(sorted(unknown)[0], 'Only descriptive course fields can be updated.')

        course = self.get_course(course_id)
        if course is None:
            return None

        for name, value in fields.items():
            setattr(course, name, value)
        self.db.commit()
        self.db.refresh(course)
        return course

    def delete_course(self, course_id: str) -> bool:
        course = self.get_course(course_id)
        if course is None:
            return False

        self.db.delete(course)
        self.db.commit()
        return True

    # Enrollments

    def is_enrolled(self, course_id: str, student_id: str) -> bool:
        return self.db.query(Enrollment.id).filter(
            Enrollment.course_id == course_id,
            Enrollment.student_id == student_id,
        ).first() is not None

    def append_enrollment_if_capacity(self, course_id: str, student_id: str) -> EnrollmentWrite:
        """Take a seat and record the student in one transaction.

        The seat counter is bumped by a single conditional UPDATE, so two
        sessions that both saw a free seat cannot both get it.
        """
        student = self.get_user(student_id)
        if student is None or student.role != UserRole.STUDENT.value:
            raise ReferentialIntegrityError('student_id', 'Only existing students can be enrolled.')

        result = self.db.execute(
            update(Course)
            .where(Course.id == course_id, Course.enrolled_count < Course.capacity)
            .values(enrolled_count=Course.enrolled_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            if self.get_course(course_id) is None:
                return EnrollmentWrite.MISSING
            if self.is_enrolled(course_id, student_id):
                return EnrollmentWrite.DUPLICATE
            return EnrollmentWrite.FULL

        self.db.add(Enrollment(course_id=course_id, student_id=student_id))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return EnrollmentWrite.DUPLICATE

        return EnrollmentWrite.APPENDED

    # Seeding

    def seed_if_empty(self, users: Iterable[User], courses: Iterable[Course]) -> bool:
        if self.db.query(User.id).first() is not None:
            return False

        users = list(users)
        courses = list(courses)
        for user in users:
            user.email = user.email.strip().lower()
            self.db.add(user)
        self.db.flush()

        for position, course in enumerate(courses, start=1):
            self._check_course_references(course)
            course.position = position
            course.enrolled_count = len(course.enrollments)
            self.db.add(course)

        self.db.commit()
        logger.info('Seeded record store with %d users and %d courses.', len(users), len(courses))
        return True

    def _check_course_references(self, course: Course) -> None:
        instructor = self.get_user(course.instructor_id)
        if instructor is None or instructor.role not in COURSE_MANAGER_ROLES:
            raise ReferentialIntegrityError(
                'instructor_id',
                'Courses must belong to an existing instructor or admin.',
            )

        seen: set[str] = set()
        for enrollment in course.enrollments:
            student = self.get_user(enrollment.student_id)
            if student is None or student.role != UserRole.STUDENT.value:
                raise ReferentialIntegrityError('enrolled_student_ids', 'Only existing students can be enrolled.')
            if enrollment.student_id in seen:
                raise FieldValidationError('enrolled_student_ids', 'A student can only be enrolled once.')
            seen.add(enrollment.student_id)

        if len(seen) > course.capacity:
            raise FieldValidationError('enrolled_student_ids', 'Enrollments exceed course capacity.')

    def _next_course_position(self) -> int:
        return (self.db.query(func.max(Course.position)).scalar() or 0) + 1


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)
