from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.errors import NotFoundError
from app.crud import crud_course
from app.db.models import User
from app.db.session import get_db
from app.schemas.course import CourseCreate, CourseResponse, CourseUpdate

router = APIRouter(prefix="/courses", tags=["Courses"])


def _owned_course_or_404(db: Session, user: User, course_id: str):
    course = crud_course.get_user_course(db, user.id, course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


@router.get("", response_model=List[CourseResponse])
def list_courses(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_course.list_courses(db, current_user.id)


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return crud_course.create_course(db, current_user.id, payload)


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(course_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _owned_course_or_404(db, current_user, course_id)


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: str,
    payload: CourseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    course = _owned_course_or_404(db, current_user, course_id)
    return crud_course.update_course(db, course, payload)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    course = _owned_course_or_404(db, current_user, course_id)
    crud_course.delete_course(db, course)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
