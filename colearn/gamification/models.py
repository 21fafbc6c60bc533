from pydantic import BaseModel
from typing import List, Optional


class UserGamification(BaseModel):
    user_id: str
    xp: int = 0
    streak: int = 0
    last_active_date: str = ""  # YYYY-MM-DD, "" until first activity
    badges: List[str] = []
    lessons_today: int = 0
    total_lessons: int = 0
    total_courses: int = 0
    total_assignments: int = 0


class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str


class Level(BaseModel):
    level: int
    name: str
    current_xp: int
    next_level_xp: int
    progress: int  # % towards next level


class XpEvent(BaseModel):
    xp_gained: int
    new_badges: List[str] = []
    leveled_up: bool = False
    old_level: int
    new_level: int


class LeaderboardEntry(BaseModel):
    user_id: str
    name: Optional[str] = None
    xp: int
    level: int
    streak: int


class GamificationSummary(BaseModel):
    record: UserGamification
    level: Level
    badges: List[Badge]
