import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud.base import parse_uuid
from app.db.models import Course
from app.schemas.course import CourseCreate, CourseUpdate

# request field -> column
FIELD_COLUMNS = {"mainSkills": "main_skills"}


def get_course(db: Session, course_id):
    """Look a course up by id regardless of owner; malformed ids find nothing."""
    course_uuid = parse_uuid(course_id)
    if course_uuid is None:
        return None
    return db.get(Course, course_uuid)


def get_user_course(db: Session, user_id, course_id):
    course = get_course(db, course_id)
    if course is None or course.user_id != user_id:
        return None
    return course


def list_courses(db: Session, user_id):
    result = db.execute(select(Course).where(Course.user_id == user_id).order_by(Course.created_at.desc()))
    return result.scalars().all()


def create_course(db: Session, user_id, data: CourseCreate):
    values = data.model_dump()
    course = Course(
        id=uuid.uuid4(),
        user_id=user_id,
        **{FIELD_COLUMNS.get(key, key): value for key, value in values.items()},
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def update_course(db: Session, course: Course, data: CourseUpdate):
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(course, FIELD_COLUMNS.get(key, key), value)
    db.commit()
    db.refresh(course)
    return course


def delete_course(db: Session, course: Course) -> None:
    db.delete(course)
    db.commit()
