from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum

from colearn.gamification.models import XpEvent
from colearn.utils import iso_now

# ==================== ENUMS ====================

class CourseStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"

class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TEXT = "text"
    CODE = "code"

# ==================== COURSE TREE ====================

class Lesson(BaseModel):
    id: str
    title: str
    content: str = ""  # markdown
    duration: int = 30  # minutes
    completed: bool = False

class Module(BaseModel):
    id: str
    title: str
    description: str = ""
    lessons: List[Lesson] = []
    completed: bool = False

class Question(BaseModel):
    id: str
    question: str
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    user_answer: Optional[str] = None

class Assignment(BaseModel):
    id: str
    module_id: str
    title: str
    description: str = ""
    questions: List[Question] = []
    completed: bool = False
    score: Optional[int] = None  # 0-100

class Course(BaseModel):
    id: str
    title: str
    description: str = ""
    goal: str
    duration: int  # days
    modules: List[Module] = []
    assignments: List[Assignment] = []
    progress: int = 0  # 0-100
    status: CourseStatus = CourseStatus.ACTIVE
    created_at: str = Field(default_factory=iso_now)
    completed_at: Optional[str] = None

# ==================== REQUESTS ====================

class CourseGenerateRequest(BaseModel):
    goal: str
    duration: int = 30

    @field_validator("goal")
    @classmethod
    def goal_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Goal is required")
        return v.strip()

    @field_validator("duration")
    @classmethod
    def duration_positive(cls, v):
        if v < 1 or v > 365:
            raise ValueError("Duration must be between 1 and 365 days")
        return v

class AssignmentSubmission(BaseModel):
    answers: List[str]

# ==================== RESPONSES ====================

class CertificateData(BaseModel):
    user_name: str
    course_title: str
    modules_count: int
    lessons_count: int
    completed_date: Optional[str] = None

class LessonCompleteResult(BaseModel):
    course: Course
    newly_completed: bool
    xp_events: List[XpEvent] = []

class AssignmentResult(BaseModel):
    course: Course
    assignment: Assignment
    score: int
    xp_event: Optional[XpEvent] = None
