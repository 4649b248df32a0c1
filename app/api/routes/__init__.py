from fastapi import APIRouter

from .assistant import chat_router
from .assistant import router as assistant
from .auth import router as auth
from .chat_history import router as chat_history
from .courses import router as courses
from .quiz import router as quiz
from .user_stats import router as user_stats

api_router = APIRouter()

api_router.include_router(auth)
api_router.include_router(courses)
api_router.include_router(quiz)
api_router.include_router(user_stats)
api_router.include_router(chat_history)
api_router.include_router(assistant)
api_router.include_router(chat_router)
