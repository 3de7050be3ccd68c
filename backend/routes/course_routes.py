import math
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_current_user, get_optional_user
from backend.core.errors import BusinessRuleViolation, FieldValidationError
from backend.models.course import CATEGORIES, DEFAULT_CATEGORY
from backend.models.user import User
from backend.routes.errors import to_http_exception
from backend.services import courses as course_service
from backend.services.course_filter import ALL, filter_courses, search_courses
from backend.services.course_generator import CourseDetailsGenerator, get_course_generator
from backend.services.dashboard import compute_stats, group_by_day
from backend.services.enrollment import EnrollmentOutcome, enroll
from backend.store import RecordStore, get_store

router = APIRouter(tags=['courses'])

ENROLLMENT_MESSAGES = {
    EnrollmentOutcome.ENROLLED: 'Successfully enrolled!',
    EnrollmentOutcome.ALREADY_ENROLLED: 'You are already enrolled in this course.',
}


class CourseResponse(BaseModel):
    id: str
    title: str
    description: str | None = ''
    instructor_id: str
    instructor_name: str
    date: date
    price: float
    capacity: int
    enrolled_student_ids: list[str]
    spots_left: int
    is_full: bool
    image_url: str | None = None
    category: str | None = None

    class Config:
        from_attributes = True


class CreateCourseRequest(BaseModel):
    title: str
    description: str = ''
    date: date
    price: float = 50
    capacity: int = 10
    category: str = DEFAULT_CATEGORY
    image_url: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        return normalized

    @field_validator('price')
    @classmethod
    def validate_price(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError('Price must be a finite amount.')
        if value < 0:
            raise ValueError('Price cannot be negative.')
        return value

    @field_validator('capacity')
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        if value < 1:
            raise ValueError('Capacity must be at least 1.')
        return value

    @field_validator('category')
    @classmethod
    def validate_category(cls, value: str) -> str:
        normalized = value.strip() or DEFAULT_CATEGORY
        if normalized not in CATEGORIES:
            raise ValueError('Invalid category.')
        return normalized


class EnrollmentResponse(BaseModel):
    status: str
    message: str
    course: CourseResponse


class StatsResponse(BaseModel):
    total_courses: int
    total_students: int
    total_revenue: float


class CalendarDayResponse(BaseModel):
    date: date
    courses: list[CourseResponse]


class GenerateDetailsRequest(BaseModel):
    title: str

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Enter a title first.')
        return normalized


class GeneratedDetailsResponse(BaseModel):
    generated: bool
    description: str = ''
    prerequisites: str = ''
    suggested_description: str = ''


def raise_for_domain_error(exc: Exception, store: RecordStore) -> None:
    if isinstance(exc, SQLAlchemyError):
        store.db.rollback()
    raise to_http_exception(exc) from exc


@router.get('', response_model=list[CourseResponse])
def list_courses(
    q: str | None = Query(default=None),
    store: RecordStore = Depends(get_store),
):
    try:
        return search_courses(store.list_courses(), q)
    except SQLAlchemyError as exc:
        raise_for_domain_error(exc, store)


@router.get('/categories', response_model=list[str])
def list_categories():
    return list(CATEGORIES)


@router.get('/dashboard', response_model=list[CourseResponse])
def list_dashboard_courses(
    tab: str = Query(default='mine', pattern='^(mine|all)$'),
    category: str = Query(default=ALL),
    instructor_id: str = Query(default=ALL),
    start: str = Query(default=''),
    end: str = Query(default=''),
    current_user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        return filter_courses(
            store.list_courses(),
            role=current_user.role,
            actor_id=current_user.id,
            active_tab=tab,
            category=category,
            instructor_id=instructor_id,
            date_start=start,
            date_end=end,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Dates must use the YYYY-MM-DD format.',
        ) from exc
    except SQLAlchemyError as exc:
        raise_for_domain_error(exc, store)


@router.get('/calendar', response_model=list[CalendarDayResponse])
def list_calendar_days(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    tab: str = Query(default='mine', pattern='^(mine|all)$'),
    current_user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        visible = filter_courses(store.list_courses(), current_user.role, current_user.id, tab)
    except SQLAlchemyError as exc:
        raise_for_domain_error(exc, store)

    return [
        CalendarDayResponse(date=day, courses=[CourseResponse.model_validate(course) for course in day_courses])
        for day, day_courses in group_by_day(visible, year, month).items()
    ]


@router.get('/stats', response_model=StatsResponse)
def get_stats(
    current_user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    try:
        course_service.require_course_manager(current_user)
        stats = compute_stats(store.list_courses(), current_user)
    except (BusinessRuleViolation, SQLAlchemyError) as exc:
        raise_for_domain_error(exc, store)

    return StatsResponse(
        total_courses=stats.total_courses,
        total_students=stats.total_students,
        total_revenue=stats.total_revenue,
    )


@router.post('/generate-details', response_model=GeneratedDetailsResponse)
def generate_details(
    data: GenerateDetailsRequest,
    current_user: User = Depends(get_current_user),
    generator: CourseDetailsGenerator = Depends(get_course_generator),
):
    try:
        course_service.require_course_manager(current_user)
    except BusinessRuleViolation as exc:
        raise to_http_exception(exc) from exc

    details = generator.generate(data.title)
    if details is None:
        return GeneratedDetailsResponse(generated=False)

    return GeneratedDetailsResponse(
        generated=True,
        description=details.description,
        prerequisites=details.prerequisites,
        suggested_description=details.as_description(),
    )


@router.get('/{course_id}', response_model=CourseResponse)
def get_course(course_id: str, store: RecordStore = Depends(get_store)):
    try:
        course = store.get_course(course_id)
    except SQLAlchemyError as exc:
        raise_for_domain_error(exc, store)

    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Course not found.')
    return course


@router.post('', response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CreateCourseRequest,
    current_user: User | None = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    try:
        return course_service.create_course(
            store,
            current_user,
            title=data.title,
            description=data.description,
            course_date=data.date,
            price=data.price,
            capacity=data.capacity,
            category=data.category,
            image_url=data.image_url,
        )
    except (BusinessRuleViolation, FieldValidationError, SQLAlchemyError) as exc:
        raise_for_domain_error(exc, store)


@router.delete('/{course_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: str,
    current_user: User | None = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    try:
        course_service.delete_course(store, current_user, course_id)
    except (BusinessRuleViolation, SQLAlchemyError) as exc:
        raise_for_domain_error(exc, store)


@router.post('/{course_id}/enroll', response_model=EnrollmentResponse)
def enroll_in_course(
    course_id: str,
    current_user: User | None = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    try:
        outcome = enroll(store, course_id, current_user)
        course = store.get_course(course_id)
    except (BusinessRuleViolation, FieldValidationError, SQLAlchemyError) as exc:
        raise_for_domain_error(exc, store)

    return EnrollmentResponse(
        status=outcome.value,
        message=ENROLLMENT_MESSAGES[outcome],
        course=CourseResponse.model_validate(course),
    )
