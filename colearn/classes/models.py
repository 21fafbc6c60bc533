from pydantic import BaseModel, Field, field_validator
from typing import List
from enum import Enum

from colearn.utils import iso_now

# ==================== ENUMS ====================

class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

# ==================== CLASSES ====================

class ClassGroup(BaseModel):
    id: str
    name: str
    creator_id: str
    members: List[str] = []  # user ids
    created_at: str = Field(default_factory=iso_now)

class ClassInvite(BaseModel):
    id: str
    class_id: str
    from_user_id: str
    to_user_id: str
    status: InviteStatus = InviteStatus.PENDING
    created_at: str = Field(default_factory=iso_now)

class IncomingInvite(ClassInvite):
    class_name: str
    from_user_name: str

class ClassChatMessage(BaseModel):
    id: str
    class_id: str
    user_id: str
    user_name: str
    content: str
    timestamp: str = Field(default_factory=iso_now)

# ==================== REQUESTS ====================

class ClassNameRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Class name is required")
        return v.strip()

class InviteRequest(BaseModel):
    to_user_id: str

class ClassMessageRequest(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Message is empty")
        return v.strip()
