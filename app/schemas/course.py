from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseConfig, UTCDateTime


class Milestone(BaseModel):
    name: str
    deadline: Optional[str] = None


class CourseCreate(BaseModel):
    name: str
    provider: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None
    objectives: List[str] = []
    milestones: List[Milestone] = []
    prerequisites: List[str] = []
    mainSkills: List[str] = []


class CourseUpdate(BaseModel):
    name: Optional[str] = None
    provider: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None
    objectives: Optional[List[str]] = None
    milestones: Optional[List[Milestone]] = None
    prerequisites: Optional[List[str]] = None
    mainSkills: Optional[List[str]] = None


class CourseResponse(BaseConfig):
    id: UUID
    userId: UUID = Field(validation_alias="user_id")
    name: str
    provider: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None
    objectives: List[str] = []
    milestones: List[Milestone] = []
    prerequisites: List[str] = []
    mainSkills: List[str] = Field(default_factory=list, validation_alias="main_skills")
    createdAt: Optional[UTCDateTime] = Field(default=None, validation_alias="created_at")
    updatedAt: Optional[UTCDateTime] = Field(default=None, validation_alias="updated_at")
