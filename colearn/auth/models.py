from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from colearn.utils import iso_now

# ==================== USER ====================

class User(BaseModel):
    id: str
    email: str
    username: str
    name: str
    avatar: Optional[str] = None
    created_at: str = Field(default_factory=iso_now)

# ==================== REQUESTS ====================

class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    username: str

    @field_validator("email")
    @classmethod
    def email_format(cls, v):
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("name", "username")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Field is required")
        return v.strip()

class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None

# ==================== RESPONSES ====================

class AuthResponse(BaseModel):
    user: User
    access_token: str
    token_type: str = "bearer"

class UserList(BaseModel):
    users: List[User]
