import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_quiz_generator
from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.crud import crud_course, crud_quiz
from app.db.models import User
from app.db.session import get_db
from app.schemas.quiz import GenerationRequest, Question, SaveResultRequest, history_entry
from app.services.quiz_generator import (
    QuizGenerator,
    resolve_question_count,
    resolve_time_per_question,
    validate_generation_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Quiz"])


@router.post("/quiz/generate", response_model=List[Question])
@router.post("/generate-quiz", response_model=List[Question], include_in_schema=False)
async def generate_quiz(
    payload: GenerationRequest,
    response: Response,
    db: Session = Depends(get_db),
    generator: QuizGenerator = Depends(get_quiz_generator),
):
    validate_generation_request(payload)
    generator.ensure_configured()

    count = resolve_question_count(payload.numberOfQuestions, settings.QUIZ_DEFAULT_QUESTIONS, settings.QUIZ_MAX_QUESTIONS)
    time_per_question = resolve_time_per_question(payload.timePerQuestion, settings.QUIZ_DEFAULT_TIME_PER_QUESTION)

    course = crud_course.get_course(db, payload.courseId)
    if course is None:
        logger.warning("Quiz requested for unknown course %s", payload.courseId)
        raise NotFoundError("Course not found", error=f"No course found with ID: {payload.courseId}")

    result = await generator.generate(course.name, count, payload.difficulty.strip(), time_per_question)
    response.headers["X-Model-Used"] = result.model
    return result.questions


@router.post("/quiz/save-result")
def save_quiz_result(
    payload: SaveResultRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not payload.courseId:
        raise ValidationError("Missing required fields", error="Course ID is required")
    if payload.questions is None:
        raise ValidationError("Missing required fields", error="Questions array is required")
    if payload.score is None or payload.totalQuestions is None or not payload.difficulty:
        raise ValidationError("Missing required fields", error="Please provide all required quiz data")

    course = crud_course.get_course(db, payload.courseId)
    if course is None:
        raise NotFoundError("Course not found", error=f"No course found with ID: {payload.courseId}")

    record = crud_quiz.create_quiz_record(
        db,
        user_id=current_user.id,
        course_id=course.id,
        score=payload.score,
        total_questions=payload.totalQuestions,
        difficulty=payload.difficulty,
        questions=payload.questions,
        time_spent=payload.timeSpent,
        time_per_question=payload.timePerQuestion,
    )
    logger.info("Saved quiz %s for user %s", record.id, current_user.id)

    history = [history_entry(quiz) for quiz in crud_quiz.recent_quizzes(db, current_user.id)]
    return {
        "message": "Quiz saved successfully",
        "quiz": history_entry(record),
        "history": history,
    }


@router.get("/quiz/history")
def quiz_history(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [history_entry(quiz) for quiz in crud_quiz.recent_quizzes(db, current_user.id)]


@router.get("/quiz/stats")
def quiz_stats(db: Session = Depends(get_db)):
    return crud_quiz.global_quiz_stats(db)
