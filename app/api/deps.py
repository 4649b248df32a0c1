from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_token
from app.crud import crud_user
from app.db.session import get_db
from app.services.llm_client import LLMClient
from app.services.quiz_generator import QuizGenerator

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)):
    payload = decode_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    user = crud_user.get_user(db, user_id=user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient.from_settings(settings)


def get_quiz_generator(llm: LLMClient = Depends(get_llm_client)) -> QuizGenerator:
    return QuizGenerator.from_settings(llm, settings)
