from datetime import date

import pytest

from backend.core.errors import EmailAlreadyRegistered, FieldValidationError, ReferentialIntegrityError
from backend.models.course import Course, Enrollment
from backend.models.user import User
from backend.seed import build_demo_courses, build_demo_users, seed_demo_data
from backend.store import EnrollmentWrite, RecordStore


def _course(course_id: str, instructor_id: str = '2', capacity: int = 3, **extra) -> Course:
    return Course(
        id=course_id,
        title=extra.pop('title', 'Spoon Carving'),
        instructor_id=instructor_id,
        instructor_name='Bob Instructor',
        date=extra.pop('date', date(2025, 2, 1)),
        price=extra.pop('price', 40),
        capacity=capacity,
        category=extra.pop('category', 'Woodworking'),
        **extra,
    )


def test_seed_if_empty_loads_demo_data_once(store: RecordStore) -> None:
    assert store.seed_if_empty(build_demo_users(), build_demo_courses(date(2025, 1, 1))) is True
    assert store.seed_if_empty(build_demo_users(), build_demo_courses(date(2025, 1, 1))) is False

    assert [user.id for user in store.list_users()] == ['1', '2', '3']
    assert [course.id for course in store.list_courses()] == ['c1', 'c2', 'c3', 'c4', 'c5']

    ceramics = store.get_course('c1')
    assert ceramics.enrolled_student_ids == ['3']
    assert ceramics.enrolled_count == 1
    assert ceramics.date == date(2025, 1, 3)


def test_seed_demo_data_runs_once_per_process(store: RecordStore, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.seed._seed_checked', False)

    assert seed_demo_data(store) is True
    assert seed_demo_data(store) is False
    assert len(store.list_courses()) == 5


def test_find_user_by_email_is_case_insensitive(seeded_store: RecordStore) -> None:
    user = seeded_store.find_user_by_email('  Charlie@GMAIL.com ')

    assert user is not None
    assert user.id == '3'


def test_insert_user_rejects_duplicate_email(seeded_store: RecordStore) -> None:
    with pytest.raises(EmailAlreadyRegistered):
        seeded_store.insert_user(User(id='99', name='Copy Cat', email='BOB@craft.com', role='STUDENT'))

    assert seeded_store.get_user('99') is None


def test_list_courses_filters_by_indexed_fields(seeded_store: RecordStore) -> None:
    assert [course.id for course in seeded_store.list_courses(instructor_id='1')] == ['c3', 'c5']
    assert [course.id for course in seeded_store.list_courses(category='Leather')] == ['c2']


def test_list_users_filters_by_role(seeded_store: RecordStore) -> None:
    instructors = seeded_store.list_users(role='INSTRUCTOR')

    assert [user.name for user in instructors] == ['Bob Instructor']


def test_insert_course_appends_in_insertion_order(seeded_store: RecordStore) -> None:
    seeded_store.insert_course(_course('c6'))

    assert [course.id for course in seeded_store.list_courses()][-1] == 'c6'


def test_insert_course_rejects_unknown_instructor(seeded_store: RecordStore) -> None:
    with pytest.raises(ReferentialIntegrityError) as exception_info:
        seeded_store.insert_course(_course('c6', instructor_id='404'))

    assert exception_info.value.field == 'instructor_id'


def test_insert_course_rejects_student_as_instructor(seeded_store: RecordStore) -> None:
    with pytest.raises(ReferentialIntegrityError):
        seeded_store.insert_course(_course('c6', instructor_id='3'))


def test_insert_course_rejects_enrollments_beyond_capacity(seeded_store: RecordStore) -> None:
    seeded_store.insert_user(User(id='4', name='Dana Student', email='dana@example.com', role='STUDENT'))

    with pytest.raises(FieldValidationError):
        seeded_store.insert_course(
            _course('c6', capacity=1, enrollments=[Enrollment(student_id='3'), Enrollment(student_id='4')])
        )


def test_update_course_changes_descriptive_fields(seeded_store: RecordStore) -> None:
    updated = seeded_store.update_course('c2', description='Bring an apron.', price=99)

    assert updated.description == 'Bring an apron.'
    assert updated.price == 99
    assert updated.enrolled_student_ids == []


def test_update_course_refuses_enrollment_fields(seeded_store: RecordStore) -> None:
    with pytest.raises(FieldValidationError):
        seeded_store.update_course('c2', enrolled_count=0)


def test_update_course_returns_none_for_unknown_id(seeded_store: RecordStore) -> None:
    assert seeded_store.update_course('missing', title='Anything') is None


def test_delete_course_removes_course_and_enrollments(seeded_store: RecordStore) -> None:
    assert seeded_store.delete_course('c1') is True

    assert seeded_store.get_course('c1') is None
    assert seeded_store.db.query(Enrollment).filter(Enrollment.course_id == 'c1').count() == 0


def test_delete_course_returns_false_for_unknown_id(seeded_store: RecordStore) -> None:
    assert seeded_store.delete_course('missing') is False
    assert len(seeded_store.list_courses()) == 5


def test_append_enrollment_if_capacity_takes_a_seat(seeded_store: RecordStore) -> None:
    assert seeded_store.append_enrollment_if_capacity('c2', '3') is EnrollmentWrite.APPENDED

    course = seeded_store.get_course('c2')
    assert course.enrolled_student_ids == ['3']
    assert course.enrolled_count == 1


def test_append_enrollment_if_capacity_reports_full_course(seeded_store: RecordStore) -> None:
    seeded_store.insert_course(_course('tiny', capacity=1, enrollments=[Enrollment(student_id='3')]))
    seeded_store.insert_user(User(id='4', name='Dana Student', email='dana@example.com', role='STUDENT'))

    assert seeded_store.append_enrollment_if_capacity('tiny', '4') is EnrollmentWrite.FULL
    assert seeded_store.get_course('tiny').enrolled_student_ids == ['3']


def test_append_enrollment_if_capacity_reports_duplicate_without_taking_a_seat(seeded_store: RecordStore) -> None:
    assert seeded_store.append_enrollment_if_capacity('c1', '3') is EnrollmentWrite.DUPLICATE

    course = seeded_store.get_course('c1')
    assert course.enrolled_student_ids == ['3']
    assert course.enrolled_count == 1


def test_append_enrollment_if_capacity_reports_missing_course(seeded_store: RecordStore) -> None:
    assert seeded_store.append_enrollment_if_capacity('missing', '3') is EnrollmentWrite.MISSING


def test_append_enrollment_if_capacity_rejects_unknown_student(seeded_store: RecordStore) -> None:
    with pytest.raises(ReferentialIntegrityError):
        seeded_store.append_enrollment_if_capacity('c2', '404')


def test_append_enrollment_if_capacity_rejects_non_student(seeded_store: RecordStore) -> None:
    with pytest.raises(ReferentialIntegrityError):
        seeded_store.append_enrollment_if_capacity('c2', '2')

    course = seeded_store.get_course('c2')
    assert course.enrolled_student_ids == []
    assert course.enrolled_count == 0


def test_append_enrollment_if_capacity_prefers_duplicate_over_full(session_factory, seeded_store: RecordStore) -> None:
    seeded_store.insert_course(_course('last-seat', capacity=1))
    seeded_store.insert_user(User(id='4', name='Dana Student', email='dana@example.com', role='STUDENT'))

    first_session = session_factory()
    second_session = session_factory()
    try:
        first_store = RecordStore(first_session)
        second_store = RecordStore(second_session)
        assert second_store.get_course('last-seat').enrolled_count == 0

        assert first_store.append_enrollment_if_capacity('last-seat', '4') is EnrollmentWrite.APPENDED
        assert second_store.append_enrollment_if_capacity('last-seat', '4') is EnrollmentWrite.DUPLICATE
    finally:
        first_session.close()
        second_session.close()

    seeded_store.db.expire_all()
    assert seeded_store.get_course('last-seat').enrolled_student_ids == ['4']
