from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from app.schemas.base import to_utc_iso


class GenerationRequest(BaseModel):
    """Body of POST /quiz/generate. Presence is checked by the pipeline, not here."""

    courseId: Optional[str] = None
    numberOfQuestions: Optional[Union[int, float, str]] = None
    difficulty: Optional[str] = None
    timePerQuestion: Optional[Union[int, float, str]] = None


class Question(BaseModel):
    id: int
    question: str
    options: List[str]
    correctAnswer: str
    timePerQuestion: int


class AnsweredQuestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: Optional[str] = None
    correctAnswer: Optional[str] = None
    userAnswer: Optional[str] = None
    answer: Optional[str] = None
    isCorrect: Optional[bool] = None
    correct: Optional[bool] = None


class SaveResultRequest(BaseModel):
    courseId: Optional[str] = None
    questions: Optional[List[AnsweredQuestion]] = None
    score: Optional[float] = None
    totalQuestions: Optional[int] = None
    difficulty: Optional[str] = None
    timeSpent: Optional[float] = None
    timePerQuestion: Optional[float] = None


def percentage(score, total) -> float:
    return score / total * 100 if score and total else 0


def history_entry(record) -> dict:
    """Summary of a saved quiz as shown in history lists."""
    course = record.course
    return {
        "id": str(record.id),
        "courseId": str(course.id) if course else None,
        "courseName": course.name if course else "Unknown Course",
        "score": record.score,
        "totalQuestions": record.total_questions,
        "difficulty": record.difficulty,
        "date": to_utc_iso(record.date),
        "timeSpent": record.time_spent or 0,
        "percentageScore": percentage(record.score, record.total_questions),
    }


def full_history_entry(record) -> dict:
    return {
        "id": str(record.id),
        "userId": str(record.user_id),
        "courseId": str(record.course_id) if record.course_id else None,
        "score": record.score,
        "totalQuestions": record.total_questions,
        "difficulty": record.difficulty,
        "questions": record.questions or [],
        "timeSpent": record.time_spent or 0,
        "date": to_utc_iso(record.date),
        "scorePercentage": round(percentage(record.score, record.total_questions)),
    }
