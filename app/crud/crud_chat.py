import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.crud.base import parse_uuid
from app.db.models import AIChat, ChatHistory
from app.schemas.chat import ChatMessage

AI_CHAT_HISTORY_LIMIT = 50
TITLE_LENGTH = 50


def serialize_messages(messages: List[ChatMessage]) -> List[dict]:
    """Stamp messages lacking a timestamp and make them JSON-ready."""
    now = datetime.now(timezone.utc)
    return [
        {
            "role": m.role,
            "content": m.content,
            "timestamp": (m.timestamp or now).isoformat(),
        }
        for m in messages
    ]


def _owned(db: Session, model, user_id, item_id):
    item_uuid = parse_uuid(item_id)
    if item_uuid is None:
        return None
    return db.execute(select(model).where(model.id == item_uuid, model.user_id == user_id)).scalar_one_or_none()


# Chat history


def list_chat_histories(db: Session, user_id):
    result = db.execute(
        select(ChatHistory).where(ChatHistory.user_id == user_id).order_by(ChatHistory.created_at.desc())
    )
    return result.scalars().all()


def get_chat_history(db: Session, user_id, chat_id) -> Optional[ChatHistory]:
    return _owned(db, ChatHistory, user_id, chat_id)


def create_chat_history(db: Session, user_id, messages: List[ChatMessage]) -> ChatHistory:
    chat = ChatHistory(id=uuid.uuid4(), user_id=user_id, messages=serialize_messages(messages))
    db.add(chat)
    db.commit()
    db.refresh(chat)
    return chat


def replace_chat_messages(db: Session, chat, messages: List[ChatMessage]):
    chat.messages = serialize_messages(messages)
    db.commit()
    db.refresh(chat)
    return chat


def delete_chat(db: Session, chat) -> None:
    db.delete(chat)
    db.commit()


def delete_all_chat_histories(db: Session, user_id) -> int:
    result = db.execute(delete(ChatHistory).where(ChatHistory.user_id == user_id))
    db.commit()
    return result.rowcount


# AI chats


def chat_title(messages: List[ChatMessage], chat_type: str, course_name: Optional[str] = None) -> str:
    if chat_type == "quiz_review" and course_name:
        return f"Quiz Review: {course_name}"
    first_user = next((m.content for m in messages if m.role == "user" and m.content), None)
    if not first_user:
        return "New Chat"
    return first_user[:TITLE_LENGTH]


def create_ai_chat(
    db: Session,
    user_id,
    messages: List[ChatMessage],
    chat_type: str = "general",
    metadata: Optional[dict] = None,
    title: Optional[str] = None,
) -> AIChat:
    metadata = metadata or {}
    chat = AIChat(
        id=uuid.uuid4(),
        user_id=user_id,
        title=title or chat_title(messages, chat_type, metadata.get("courseName")),
        messages=serialize_messages(messages),
        type=chat_type,
        chat_metadata=metadata,
    )
    db.add(chat)
    db.commit()
    db.refresh(chat)
    return chat


def list_ai_chats(db: Session, user_id, limit: int = AI_CHAT_HISTORY_LIMIT):
    result = db.execute(
        select(AIChat).where(AIChat.user_id == user_id).order_by(AIChat.last_updated.desc()).limit(limit)
    )
    return result.scalars().all()


def get_ai_chat(db: Session, user_id, chat_id) -> Optional[AIChat]:
    return _owned(db, AIChat, user_id, chat_id)


def update_ai_chat(db: Session, chat: AIChat, messages: List[ChatMessage]) -> AIChat:
    chat.messages = serialize_messages(messages)
    if chat.type == "general" and any(m.role == "user" and m.content for m in messages):
        chat.title = chat_title(messages, chat.type)
    chat.last_updated = datetime.now(timezone.utc)
    db.commit()
    db.refresh(chat)
    return chat
