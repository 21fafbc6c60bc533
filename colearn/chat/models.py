from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from colearn.utils import iso_now


class ChatMessage(BaseModel):
    id: str
    role: str  # "user" | "assistant"
    content: str
    timestamp: str = Field(default_factory=iso_now)


class ChatRequest(BaseModel):
    message: str
    course_id: Optional[str] = None  # ground the answer in one of the user's courses

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Message is empty")
        return v.strip()


class ChatReply(BaseModel):
    user_message: ChatMessage
    reply: ChatMessage


class TutorRequest(BaseModel):
    course_id: str
    lesson_id: str
    question: str

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Question is empty")
        return v.strip()


class TutorAnswer(BaseModel):
    lesson_id: str
    answer: str


class ChatHistory(BaseModel):
    messages: List[ChatMessage]
