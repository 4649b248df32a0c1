from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.errors import NotFoundError
from app.crud import crud_chat
from app.db.models import User
from app.db.session import get_db
from app.schemas.chat import ChatHistoryCreate, ChatHistoryResponse

router = APIRouter(prefix="/chat-history", tags=["Chat History"])


def _chat_or_404(db: Session, user: User, chat_id: str):
    chat = crud_chat.get_chat_history(db, user.id, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return chat


@router.get("", response_model=List[ChatHistoryResponse])
def list_chats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_chat.list_chat_histories(db, current_user.id)


@router.post("", response_model=ChatHistoryResponse)
def create_chat(
    payload: ChatHistoryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return crud_chat.create_chat_history(db, current_user.id, payload.messages)


# declared before /{chat_id} so "all" is not taken for an id
@router.delete("/all")
def delete_all_chats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    count = crud_chat.delete_all_chat_histories(db, current_user.id)
    return {"message": "All chats deleted successfully", "count": count}


@router.get("/{chat_id}", response_model=ChatHistoryResponse)
def get_chat(chat_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _chat_or_404(db, current_user, chat_id)


@router.put("/{chat_id}", response_model=ChatHistoryResponse)
def update_chat(
    chat_id: str,
    payload: ChatHistoryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chat = _chat_or_404(db, current_user, chat_id)
    return crud_chat.replace_chat_messages(db, chat, payload.messages)


@router.delete("/{chat_id}")
def delete_chat(chat_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    chat = _chat_or_404(db, current_user, chat_id)
    crud_chat.delete_chat(db, chat)
    return {"message": "Chat deleted successfully"}
