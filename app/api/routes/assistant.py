import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_llm_client
from app.core.config import settings
from app.core.errors import ConfigurationError, NotFoundError, ValidationError
from app.crud import crud_chat
from app.db.models import User
from app.db.session import get_db
from app.schemas.chat import AIChatRequest, AIChatResponse, AIChatSave, AIChatUpdate, AssistRequest, ChatMessage
from app.services.llm_client import LLMClient
from app.services.prompts import (
    IDENTITY_QUESTION_PATTERN,
    IDENTITY_RESPONSE,
    build_assist_prompt,
    build_explanation_prompt,
)
from app.services.retry import retry_operation

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AI Assistant"])
chat_router = APIRouter(prefix="/chat", tags=["AI Chat"])

ASSIST_TEMPERATURE = 0.7


async def _complete(llm: LLMClient, prompt: str) -> str:
    if not llm.configured:
        raise ConfigurationError(error="API key not configured")
    return await retry_operation(
        lambda: llm.generate(prompt, temperature=ASSIST_TEMPERATURE, max_tokens=settings.QUIZ_MAX_TOKENS),
        max_retries=settings.QUIZ_BACKOFF_RETRIES,
        initial_delay=settings.QUIZ_BACKOFF_INITIAL_DELAY,
    )


@router.get("/list-models")
def list_models():
    return {
        "version": "v1",
        "models": [
            {"name": settings.LLM_DEFAULT_MODEL, "role": "default"},
            {"name": settings.LLM_FALLBACK_MODEL, "role": "fallback"},
        ],
        "message": f"Using {settings.LLM_BASE_URL} with {settings.LLM_DEFAULT_MODEL}",
    }


@router.post("/ai/assist")
async def assist(payload: AssistRequest, llm: LLMClient = Depends(get_llm_client)):
    if not payload.messages:
        raise ValidationError("Invalid request format")

    last_message = payload.messages[-1].content
    logger.info("Processing message: %s", last_message[:100])

    if IDENTITY_QUESTION_PATTERN.search(last_message):
        logger.info("Identity question detected, returning canned response")
        return {"message": IDENTITY_RESPONSE}

    text = await _complete(llm, build_assist_prompt(last_message))
    logger.info("Responding with text of length %d", len(text))
    return {"message": text}


@chat_router.post("/ai")
async def chat_with_ai(
    payload: AIChatRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
):
    if not payload.message:
        raise ValidationError("Message is required")

    chat_type = payload.type or "general"
    prompt = build_explanation_prompt(payload.message) if chat_type == "quiz_explanation" else payload.message
    text = await _complete(llm, prompt)

    crud_chat.create_ai_chat(
        db,
        current_user.id,
        [ChatMessage(role="user", content=prompt), ChatMessage(role="assistant", content=text)],
        chat_type=chat_type,
    )
    return {"message": text}


@chat_router.post("/ai/save")
def save_ai_chat(
    payload: AIChatSave,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chat = crud_chat.create_ai_chat(
        db,
        current_user.id,
        payload.messages,
        chat_type=payload.type,
        metadata=payload.metadata.model_dump(exclude_none=True),
    )
    return {"success": True, "chatId": str(chat.id)}


@chat_router.get("/ai/history", response_model=List[AIChatResponse])
def ai_chat_history(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_chat.list_ai_chats(db, current_user.id)


def _ai_chat_or_404(db: Session, user: User, chat_id: str):
    chat = crud_chat.get_ai_chat(db, user.id, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return chat


@chat_router.get("/ai/{chat_id}", response_model=AIChatResponse)
def get_ai_chat(chat_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _ai_chat_or_404(db, current_user, chat_id)


@chat_router.put("/ai/{chat_id}", response_model=AIChatResponse)
def update_ai_chat(
    chat_id: str,
    payload: AIChatUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chat = _ai_chat_or_404(db, current_user, chat_id)
    return crud_chat.update_ai_chat(db, chat, payload.messages)


@chat_router.delete("/ai/{chat_id}")
def delete_ai_chat(chat_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    chat = _ai_chat_or_404(db, current_user, chat_id)
    crud_chat.delete_chat(db, chat)
    return {"success": True}
