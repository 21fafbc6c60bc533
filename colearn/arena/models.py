from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum

from colearn.gamification.models import XpEvent
from colearn.utils import iso_now

# ==================== ENUMS ====================

class DuelDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

class DuelStatus(str, Enum):
    PLAYING = "playing"
    AI_TURN = "ai_turn"
    FINISHED = "finished"

class BossDifficulty(str, Enum):
    NORMAL = "normal"
    HARD = "hard"
    NIGHTMARE = "nightmare"

class BossStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    VICTORY = "victory"
    DEFEAT = "defeat"

# ==================== PROFILE ====================

class ArenaProfile(BaseModel):
    user_id: str
    arena_rating: int = 1000
    duels_won: int = 0
    duels_lost: int = 0
    bosses_defeated: int = 0
    arena_tokens: int = 100
    win_streak: int = 0
    best_win_streak: int = 0

# ==================== DUEL ====================

class DuelQuestion(BaseModel):
    id: str
    question: str
    options: List[str]
    correct_answer: str
    difficulty: str = "medium"

class PendingRound(BaseModel):
    """Answer submitted, AI roll made, damage not yet applied"""
    answer: str
    elapsed_ms: int
    player_correct: bool
    ai_correct: bool
    ai_think_ms: int

class RoundOutcome(BaseModel):
    question_id: str
    answer: str
    elapsed_ms: int
    player_correct: bool
    ai_correct: bool
    player_points: int = 0
    ai_points: int = 0
    player_damage: int = 0  # damage taken by the player
    ai_damage: int = 0

class DuelState(BaseModel):
    id: str
    user_id: str
    topic: str
    questions: List[DuelQuestion]
    index: int = 0
    player_hp: int = 100
    ai_hp: int = 100
    player_score: int = 0
    ai_score: int = 0
    combo: int = 0
    max_combo: int = 0
    ai_name: str
    ai_difficulty: DuelDifficulty = DuelDifficulty.MEDIUM
    status: DuelStatus = DuelStatus.PLAYING
    pending: Optional[PendingRound] = None
    rounds: List[RoundOutcome] = []
    winner: Optional[str] = None  # "player" | "ai"
    created_at: str = Field(default_factory=iso_now)
    finished_at: Optional[str] = None

# ==================== BOSS FIGHT ====================

class BossMessage(BaseModel):
    role: str  # "boss" | "player"
    content: str
    damage_dealt: Optional[int] = None
    timestamp: str = Field(default_factory=iso_now)

class BossTurn(BaseModel):
    """AI judgment of one player message"""
    response: str
    player_damage: int = 0
    boss_damage: int = 0

class BossFight(BaseModel):
    id: str
    user_id: str
    topic: str
    difficulty: BossDifficulty
    boss_name: str
    boss_hp: int
    boss_max_hp: int
    player_hp: int = 100
    player_max_hp: int = 100
    round: int = 1
    max_rounds: int
    xp_reward: int
    language: str = "English"
    messages: List[BossMessage] = []
    status: BossStatus = BossStatus.IN_PROGRESS
    created_at: str = Field(default_factory=iso_now)

# ==================== REQUESTS ====================

class DuelStartRequest(BaseModel):
    topic: str
    difficulty: DuelDifficulty = DuelDifficulty.MEDIUM
    language: str = "English"

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Topic is required")
        return v.strip()

class DuelAnswerRequest(BaseModel):
    answer: str
    elapsed_ms: int = 0

    @field_validator("elapsed_ms")
    @classmethod
    def elapsed_non_negative(cls, v):
        return max(0, v)

class BossStartRequest(BaseModel):
    topic: str
    difficulty: BossDifficulty = BossDifficulty.NORMAL
    language: str = "English"

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Topic is required")
        return v.strip()

class BossMessageRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Message is required")
        return v

# ==================== RESPONSES ====================

class DuelAnswerResult(BaseModel):
    duel: DuelState
    outcome: RoundOutcome
    ai_think_ms: int
    profile: Optional[ArenaProfile] = None  # set once the duel is finished
    xp_event: Optional[XpEvent] = None

class BossTurnResult(BaseModel):
    fight: BossFight
    profile: Optional[ArenaProfile] = None
    xp_event: Optional[XpEvent] = None

class ArenaLeaderboardEntry(BaseModel):
    user_id: str
    name: Optional[str] = None
    arena_rating: int
    duels_won: int
    bosses_defeated: int
