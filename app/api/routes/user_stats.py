from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.errors import AuthorizationError
from app.crud import crud_quiz
from app.crud.base import parse_uuid
from app.db.models import User
from app.db.session import get_db
from app.schemas.base import to_utc_iso
from app.schemas.quiz import full_history_entry

router = APIRouter(tags=["User Stats"])


@router.get("/quiz-history/{user_id}")
def get_quiz_history(user_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if parse_uuid(user_id) != current_user.id:
        raise AuthorizationError(error="Unauthorized access to quiz history")

    quizzes = crud_quiz.recent_quizzes(db, current_user.id, limit=None)
    return {
        "history": [full_history_entry(quiz) for quiz in quizzes],
        "totalQuizzes": len(quizzes),
        "stats": crud_quiz.user_quiz_stats(db, current_user.id),
    }


@router.get("/dashboard")
def get_dashboard(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    recent = crud_quiz.recent_quizzes(db, current_user.id, limit=crud_quiz.DASHBOARD_RECENT_LIMIT)
    return {
        "recentQuizzes": [
            {
                "courseId": str(quiz.course_id) if quiz.course_id else None,
                "courseName": quiz.course.name if quiz.course else "Unknown Course",
                "score": quiz.score,
                "totalQuestions": quiz.total_questions,
                "date": to_utc_iso(quiz.date),
                "difficulty": quiz.difficulty,
            }
            for quiz in recent
        ],
        "courseProgress": crud_quiz.course_progress(db, current_user.id),
    }
