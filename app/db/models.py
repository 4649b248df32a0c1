import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.types import Text

from app.db.base import Base


def utcnow():
    """Function to return current UTC time with timezone info"""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    courses = relationship("Course", back_populates="user", cascade="all, delete-orphan")
    quizzes = relationship("QuizRecord", back_populates="user")


class Course(Base):
    __tablename__ = "courses"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    provider = Column(String(200))
    duration = Column(String(100))
    pace = Column(String(100))
    objectives = Column(JSON, default=list)
    milestones = Column(JSON, default=list)
    prerequisites = Column(JSON, default=list)
    main_skills = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="courses")
    quizzes = relationship("QuizRecord", back_populates="course")


class QuizRecord(Base):
    """A finished quiz attempt. Rows are written once and never updated."""

    __tablename__ = "quizzes"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    difficulty = Column(String(50), nullable=False)
    questions = Column(JSON, default=list)
    time_spent = Column(Float, default=0)
    date = Column(DateTime(timezone=True), default=utcnow, index=True)

    user = relationship("User", back_populates="quizzes")
    course = relationship("Course", back_populates="quizzes")


class ChatHistory(Base):
    __tablename__ = "chat_histories"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    messages = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class AIChat(Base):
    __tablename__ = "ai_chats"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    messages = Column(JSON, default=list)
    type = Column(String(20), default="general", nullable=False)
    # "metadata" is reserved on declarative classes
    chat_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True)
