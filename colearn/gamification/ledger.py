"""
Gamification ledger.

XP, streak, level and badge rules as pure transitions on a UserGamification
record. Every award_* function mutates the record it is given and returns an
XpEvent; persisting the record is the caller's job. Badges are only ever
added, and each id appears at most once.
"""

from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from colearn.gamification.models import Badge, LeaderboardEntry, Level, UserGamification, XpEvent
from colearn.utils import round_half_up, utc_today

# ==================== CONSTANTS ====================

LESSON_XP = 25
MODULE_XP = 200
COURSE_XP = 500
DAILY_LOGIN_XP = 10
DUEL_WIN_XP = 50
BOSS_DEFEAT_XP = {"normal": 150, "hard": 200, "nightmare": 300}

# (level, xp threshold, name), ascending
LEVELS: List[Tuple[int, int, str]] = [
    (1, 0, "Novice"),
    (2, 100, "Apprentice"),
    (3, 300, "Explorer"),
    (4, 600, "Scholar"),
    (5, 1000, "Expert"),
    (6, 1500, "Master"),
    (7, 2500, "Legend"),
]

ALL_BADGES: List[Badge] = [
    Badge(id="first_lesson", icon="🎯", name="First Step", description="Complete your first lesson"),
    Badge(id="first_course", icon="🏆", name="Graduate", description="Complete a whole course"),
    Badge(id="streak_3", icon="🔥", name="On Fire", description="Learn 3 days in a row"),
    Badge(id="streak_7", icon="⚡", name="Unstoppable", description="Learn 7 days in a row"),
    Badge(id="streak_30", icon="💎", name="Diamond Habit", description="Learn 30 days in a row"),
    Badge(id="perfect_score", icon="💯", name="Perfectionist", description="Score 100% on an assignment"),
    Badge(id="module_master", icon="📦", name="Module Master", description="Complete a module"),
    Badge(id="speed_learner", icon="⚡", name="Speed Learner", description="Complete 5 lessons in one day"),
    Badge(id="social", icon="👥", name="Team Player", description="Join a class"),
    Badge(id="ten_lessons", icon="📚", name="Bookworm", description="Complete 10 lessons"),
    Badge(id="duelist", icon="⚔️", name="Duelist", description="Win an arena duel"),
    Badge(id="boss_slayer", icon="🐉", name="Boss Slayer", description="Defeat an arena boss"),
]
BADGES_BY_ID: Dict[str, Badge] = {badge.id: badge for badge in ALL_BADGES}

# Evaluated after every award; each rule grants its badge once
BADGE_RULES: List[Tuple[str, Callable[[UserGamification], bool]]] = [
    ("first_lesson", lambda g: g.total_lessons >= 1),
    ("ten_lessons", lambda g: g.total_lessons >= 10),
    ("first_course", lambda g: g.total_courses >= 1),
    ("streak_3", lambda g: g.streak >= 3),
    ("streak_7", lambda g: g.streak >= 7),
    ("streak_30", lambda g: g.streak >= 30),
    ("speed_learner", lambda g: g.lessons_today >= 5),
]


def new_record(user_id: str) -> UserGamification:
    return UserGamification(user_id=user_id)


# ==================== LEVELS ====================

def get_level(xp: int) -> Level:
    current_idx = 0
    for idx, (_, threshold, _) in enumerate(LEVELS):
        if xp >= threshold:
            current_idx = idx

    level, threshold, name = LEVELS[current_idx]
    if current_idx + 1 < len(LEVELS):
        next_threshold = LEVELS[current_idx + 1][1]
        progress = min(100, round_half_up(100 * (xp - threshold) / (next_threshold - threshold)))
    else:
        next_threshold = threshold
        progress = 100

    return Level(level=level, name=name, current_xp=xp, next_level_xp=next_threshold, progress=progress)


# ==================== STREAK & BADGES ====================

def update_streak(g: UserGamification, today: Optional[date] = None) -> None:
    today = today or utc_today()
    today_str = today.isoformat()
    if g.last_active_date == today_str:
        return

    yesterday_str = (today - timedelta(days=1)).isoformat()
    if g.last_active_date == yesterday_str:
        g.streak += 1
    else:
        g.streak = 1
    g.last_active_date = today_str
    g.lessons_today = 0


def grant_badge(g: UserGamification, badge_id: str) -> bool:
    """Add a badge unless already held; True when newly granted"""
    if badge_id in g.badges:
        return False
    g.badges.append(badge_id)
    return True


def check_badges(g: UserGamification) -> List[str]:
    return [
        badge_id for badge_id, rule in BADGE_RULES
        if rule(g) and grant_badge(g, badge_id)
    ]


def _award(g: UserGamification, xp: int, apply: Callable[[UserGamification], List[str]]) -> XpEvent:
    old_level = get_level(g.xp).level
    g.xp += xp
    granted = apply(g)
    new_badges = granted + [b for b in check_badges(g) if b not in granted]
    new_level = get_level(g.xp).level
    return XpEvent(
        xp_gained=xp,
        new_badges=new_badges,
        leveled_up=new_level > old_level,
        old_level=old_level,
        new_level=new_level,
    )


# ==================== AWARDS ====================

def award_lesson_complete(g: UserGamification, today: Optional[date] = None) -> XpEvent:
    update_streak(g, today)

    def apply(rec: UserGamification) -> List[str]:
        rec.total_lessons += 1
        rec.lessons_today += 1
        return []

    return _award(g, LESSON_XP, apply)


def assignment_xp(score: int) -> int:
    if score == 100:
        return 100
    if score >= 80:
        return 75
    return 50


def award_assignment_complete(g: UserGamification, score: int, today: Optional[date] = None) -> XpEvent:
    update_streak(g, today)

    def apply(rec: UserGamification) -> List[str]:
        rec.total_assignments += 1
        if score == 100 and grant_badge(rec, "perfect_score"):
            return ["perfect_score"]
        return []

    return _award(g, assignment_xp(score), apply)


def award_module_complete(g: UserGamification) -> XpEvent:
    return _award(g, MODULE_XP, lambda rec: ["module_master"] if grant_badge(rec, "module_master") else [])


def award_course_complete(g: UserGamification) -> XpEvent:
    def apply(rec: UserGamification) -> List[str]:
        rec.total_courses += 1
        return []

    return _award(g, COURSE_XP, apply)


def award_social_badge(g: UserGamification) -> bool:
    return grant_badge(g, "social")


def award_duel_win(g: UserGamification) -> XpEvent:
    return _award(g, DUEL_WIN_XP, lambda rec: ["duelist"] if grant_badge(rec, "duelist") else [])


def award_boss_defeat(g: UserGamification, difficulty: str) -> XpEvent:
    xp = BOSS_DEFEAT_XP.get(difficulty, BOSS_DEFEAT_XP["normal"])
    return _award(g, xp, lambda rec: ["boss_slayer"] if grant_badge(rec, "boss_slayer") else [])


def record_daily_login(g: UserGamification, today: Optional[date] = None) -> Optional[XpEvent]:
    """At most once per day: streak update, +10 XP, daily lesson counter reset"""
    today = today or utc_today()
    if g.last_active_date == today.isoformat():
        return None

    update_streak(g, today)

    def apply(rec: UserGamification) -> List[str]:
        rec.lessons_today = 0
        return []

    return _award(g, DAILY_LOGIN_XP, apply)


# ==================== LEADERBOARD ====================

def class_leaderboard(records: Iterable[UserGamification]) -> List[LeaderboardEntry]:
    entries = [
        LeaderboardEntry(user_id=g.user_id, xp=g.xp, level=get_level(g.xp).level, streak=g.streak)
        for g in records
    ]
    return sorted(entries, key=lambda e: e.xp, reverse=True)
