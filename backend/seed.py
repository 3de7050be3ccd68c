"""Demo users and workshops loaded into an empty store."""

import logging
from datetime import date, timedelta
from threading import Lock

from backend.models.course import Course, Enrollment
from backend.models.user import User, UserRole
from backend.store import RecordStore

logger = logging.getLogger(__name__)

_seed_lock = Lock()
_seed_checked = False


def build_demo_users() -> list[User]:
    return [
        User(id='1', name='Alice Admin', email='alice@craft.com', role=UserRole.ADMIN.value,
             avatar_url='https://picsum.photos/id/1/200/200'),
        User(id='2', name='Bob Instructor', email='bob@craft.com', role=UserRole.INSTRUCTOR.value,
             avatar_url='https://picsum.photos/id/2/200/200'),
        User(id='3', name='Charlie Student', email='charlie@gmail.com', role=UserRole.STUDENT.value,
             avatar_url='https://picsum.photos/id/3/200/200'),
    ]


def build_demo_courses(today: date | None = None) -> list[Course]:
    today = today or date.today()

    def days_from_now(days: int) -> date:
        return today + timedelta(days=days)

    return [
        Course(
            id='c1',
            title='Modern Ceramics & Glazing',
            description='Learn the fundamentals of wheel throwing and glazing techniques. Create your own bowl set.',
            instructor_id='2',
            instructor_name='Bob Instructor',
            date=days_from_now(2),
            price=120,
            capacity=8,
            enrollments=[Enrollment(student_id='3')],
            image_url='https://picsum.photos/id/40/800/600',
            category='Ceramics',
        ),
        Course(
            id='c2',
            title='Leather Crafting Basics',
            description='Design and stitch your own leather wallet. Tools and materials provided.',
            instructor_id='2',
            instructor_name='Bob Instructor',
            date=days_from_now(7),
            price=95,
            capacity=6,
            image_url='https://picsum.photos/id/80/800/600',
            category='Leather',
        ),
        Course(
            id='c3',
            title='Watercolor Landscapes',
            description='Capture the beauty of nature with watercolor techniques. Suitable for beginners.',
            instructor_id='1',
            instructor_name='Alice Admin',
            date=days_from_now(10),
            price=60,
            capacity=12,
            enrollments=[Enrollment(student_id='3')],
            image_url='https://picsum.photos/id/90/800/600',
            category='Painting',
        ),
        Course(
            id='c4',
            title='Rustic Wood Stool',
            description='Build your own three-legged stool using traditional joinery. No power tools needed.',
            instructor_id='2',
            instructor_name='Bob Instructor',
            date=days_from_now(14),
            price=150,
            capacity=5,
            image_url='https://picsum.photos/id/106/800/600',
            category='Woodworking',
        ),
        Course(
            id='c5',
            title='Intro to Weaving',
            description='Learn the basics of weaving on a frame loom. Create a beautiful wall hanging.',
            instructor_id='1',
            instructor_name='Alice Admin',
            date=days_from_now(20),
            price=85,
            capacity=10,
            image_url='https://picsum.photos/id/225/800/600',
            category='Textiles',
        ),
    ]


def seed_demo_data(store: RecordStore) -> bool:
    """Populate the store on first run; later calls in the process return early."""
    global _seed_checked

    if _seed_checked:
        return False

    with _seed_lock:
        if _seed_checked:
            return False

        seeded = store.seed_if_empty(build_demo_users(), build_demo_courses())
        if not seeded:
            logger.debug('Record store already populated; skipping demo data.')

        _seed_checked = True
        return seeded
