"""Course and enrollment model definitions."""

from sqlalchemy import CheckConstraint, Column, Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.database import Base


CATEGORIES = ('Ceramics', 'Painting', 'Leather', 'Woodworking', 'Textiles', 'General')
DEFAULT_CATEGORY = 'General'


class Course(Base):
    """Represents a bookable workshop."""
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_courses_price_non_negative'),
        CheckConstraint('capacity >= 1', name='ck_courses_capacity_positive'),
        CheckConstraint('enrolled_count <= capacity', name='ck_courses_within_capacity'),
    )

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(String, default='')
    instructor_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    instructor_name = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    price = Column(Float, nullable=False, default=0)
    capacity = Column(Integer, nullable=False)
    enrolled_count = Column(Integer, nullable=False, default=0)
    image_url = Column(String)
    category = Column(String, index=True, default=DEFAULT_CATEGORY)
    position = Column(Integer, index=True, nullable=False, default=0)  # insertion order

    enrollments = relationship(
        "Enrollment",
        order_by="Enrollment.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def enrolled_student_ids(self) -> list[str]:
        return [enrollment.student_id for enrollment in self.enrollments]

    @property
    def spots_left(self) -> int:
        return max(0, self.capacity - len(self.enrollments))

    @property
    def is_full(self) -> bool:
        return len(self.enrollments) >= self.capacity


class Enrollment(Base):
    """A student's seat in a course."""
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint('course_id', 'student_id', name='uq_enrollments_course_student'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    student_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
