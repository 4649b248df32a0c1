from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseConfig, UTCDateTime


class ChatMessage(BaseModel):
    role: str
    content: str
    timestamp: Optional[datetime] = None


class StoredChatMessage(BaseModel):
    role: str
    content: str
    timestamp: Optional[str] = None


class ChatHistoryCreate(BaseModel):
    messages: List[ChatMessage] = []


class ChatHistoryResponse(BaseConfig):
    id: UUID
    userId: UUID = Field(validation_alias="user_id")
    messages: List[StoredChatMessage] = []
    createdAt: Optional[UTCDateTime] = Field(default=None, validation_alias="created_at")


class AIChatRequest(BaseModel):
    message: Optional[str] = None
    type: Optional[str] = None


class AIChatMetadata(BaseModel):
    courseName: Optional[str] = None
    quizScore: Optional[float] = None
    totalQuestions: Optional[int] = None


class AIChatSave(BaseModel):
    messages: List[ChatMessage] = []
    type: Literal["general", "quiz_review"] = "general"
    metadata: AIChatMetadata = AIChatMetadata()


class AIChatUpdate(BaseModel):
    messages: List[ChatMessage]


class AIChatResponse(BaseConfig):
    id: UUID
    userId: UUID = Field(validation_alias="user_id")
    title: str
    messages: List[StoredChatMessage] = []
    type: str
    metadata: AIChatMetadata = Field(default_factory=AIChatMetadata, validation_alias="chat_metadata")
    createdAt: Optional[UTCDateTime] = Field(default=None, validation_alias="created_at")
    lastUpdated: Optional[UTCDateTime] = Field(default=None, validation_alias="last_updated")


class AssistMessage(BaseModel):
    role: str = "user"
    content: str


class AssistRequest(BaseModel):
    messages: Optional[List[AssistMessage]] = None
