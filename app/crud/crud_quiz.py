import uuid
from typing import List, Optional

from sqlalchemy import Float, cast, func, select
from sqlalchemy.orm import Session, joinedload

from app.db.models import Course, QuizRecord
from app.schemas.quiz import AnsweredQuestion

# courses are considered complete after this many quizzes
QUIZZES_PER_COURSE = 10

HISTORY_LIMIT = 10
DASHBOARD_RECENT_LIMIT = 5


def _percentage_expr():
    # NULLIF guards rows saved with totalQuestions == 0
    return cast(QuizRecord.score, Float) / func.nullif(QuizRecord.total_questions, 0) * 100


def _answered_question(q: AnsweredQuestion, time_per_question: Optional[float]) -> dict:
    user_answer = q.userAnswer or q.answer or None
    return {
        "question": q.question or "Unknown question",
        "correctAnswer": q.correctAnswer or "A",
        "userAnswer": user_answer,
        "isCorrect": bool(q.isCorrect or q.correct),
        "timeSpent": float(time_per_question or 0),
    }


def create_quiz_record(
    db: Session,
    user_id,
    course_id: uuid.UUID,
    score: float,
    total_questions: int,
    difficulty: str,
    questions: List[AnsweredQuestion],
    time_spent: Optional[float] = None,
    time_per_question: Optional[float] = None,
) -> QuizRecord:
    record = QuizRecord(
        id=uuid.uuid4(),
        user_id=user_id,
        course_id=course_id,
        score=int(score),
        total_questions=int(total_questions),
        difficulty=difficulty,
        questions=[_answered_question(q, time_per_question) for q in questions],
        time_spent=float(time_spent or 0),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def recent_quizzes(db: Session, user_id, limit: Optional[int] = HISTORY_LIMIT) -> List[QuizRecord]:
    query = (
        select(QuizRecord)
        .options(joinedload(QuizRecord.course))
        .where(QuizRecord.user_id == user_id)
        .order_by(QuizRecord.date.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return db.execute(query).scalars().all()


def user_quiz_stats(db: Session, user_id) -> dict:
    total, average = db.execute(
        select(func.count(QuizRecord.id), func.avg(_percentage_expr())).where(QuizRecord.user_id == user_id)
    ).one()
    return {"averageScore": float(average or 0), "totalQuizzes": total or 0}


def global_quiz_stats(db: Session) -> dict:
    total, average = db.execute(select(func.count(QuizRecord.id), func.avg(_percentage_expr()))).one()
    latest = db.execute(select(_percentage_expr()).order_by(QuizRecord.date.desc()).limit(1)).scalar()
    return {
        "totalQuizzes": total or 0,
        "averageScore": round(average or 0),
        "latestScore": round(latest or 0),
    }


def course_progress(db: Session, user_id) -> List[dict]:
    """Per-course quiz counts and averages for the user's courses, including untouched ones."""
    rows = db.execute(
        select(
            Course.id,
            Course.name,
            func.count(QuizRecord.id),
            func.sum(QuizRecord.score),
            func.sum(QuizRecord.total_questions),
        )
        .outerjoin(QuizRecord, (QuizRecord.course_id == Course.id) & (QuizRecord.user_id == user_id))
        .where(Course.user_id == user_id)
        .group_by(Course.id, Course.name)
        .order_by(Course.name)
    ).all()

    progress = []
    for course_id, name, taken, score_sum, total_sum in rows:
        average = (score_sum or 0) / total_sum * 100 if total_sum else 0
        progress.append(
            {
                "courseId": str(course_id),
                "courseName": name,
                "progress": min(100, round(taken / QUIZZES_PER_COURSE * 100)),
                "quizzesTaken": taken,
                "averageScore": round(average, 1),
            }
        )
    return progress
