"""Course lifecycle: instructors and admins publish and withdraw workshops."""

import logging
import math
import uuid
from datetime import date

from backend.core.errors import FieldValidationError, RoleNotPermitted, Unauthenticated
from backend.models.course import CATEGORIES, DEFAULT_CATEGORY, Course
from backend.models.user import COURSE_MANAGER_ROLES, User
from backend.store import RecordStore

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = 'https://picsum.photos/seed/{seed}/400/300'


def require_course_manager(actor: User | None) -> User:
    if actor is None:
        raise Unauthenticated()
    if actor.role not in COURSE_MANAGER_ROLES:
        raise RoleNotPermitted('Only instructors and admins can manage courses.')
    return actor


def create_course(
    store: RecordStore,
    actor: User | None,
    *,
    title: str,
    course_date: date | None,
    price: float,
    capacity: int,
    description: str = '',
    category: str = DEFAULT_CATEGORY,
    image_url: str | None = None,
) -> Course:
    actor = require_course_manager(actor)

    title = (title or '').strip()
    if not title:
        raise FieldValidationError('title', 'Title is required.')
    if course_date is None:
        raise FieldValidationError('date', 'Date is required.')
    if not math.isfinite(price):
        raise FieldValidationError('price', 'Price must be a finite amount.')
    if price < 0:
        raise FieldValidationError('price', 'Price cannot be negative.')
    if capacity < 1:
        raise FieldValidationError('capacity', 'Capacity must be at least 1.')

    category = (category or DEFAULT_CATEGORY).strip()
    if category not in CATEGORIES:
        raise FieldValidationError('category', f'Category must be one of: {", ".join(CATEGORIES)}.')

    course_id = uuid.uuid4().hex
    course = Course(
        id=course_id,
        title=title,
        description=(description or '').strip(),
        instructor_id=actor.id,
        instructor_name=actor.name,
        date=course_date,
        price=price,
        capacity=capacity,
        image_url=image_url or PLACEHOLDER_IMAGE_URL.format(seed=course_id),
        category=category,
    )
    course = store.insert_course(course)
    logger.info('Course %s (%s) created by %s.', course.id, course.title, actor.id)
    return course


def delete_course(store: RecordStore, actor: User | None, course_id: str) -> None:
    actor = require_course_manager(actor)

    if store.delete_course(course_id):
        logger.info('Course %s deleted by %s.', course_id, actor.id)
    else:
        logger.debug('Delete of unknown course %s ignored.', course_id)
