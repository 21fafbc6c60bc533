import logging
from datetime import date
from typing import Callable, Iterable, List, Optional

from colearn.gamification import ledger
from colearn.gamification.database import GamificationRepository
from colearn.gamification.models import (
    GamificationSummary, LeaderboardEntry, UserGamification, XpEvent
)
from colearn.storage import DocumentStore

logger = logging.getLogger(__name__)


class GamificationService:
    """Loads a user's record, applies a ledger transition, saves it back"""

    def __init__(self, store: DocumentStore, today: Optional[Callable[[], date]] = None):
        self.repo = GamificationRepository(store)
        self._today = today

    def today(self) -> Optional[date]:
        return self._today() if self._today else None

    async def _apply(self, user_id: str, transition: Callable[[UserGamification], XpEvent]) -> XpEvent:
        record = await self.repo.get_or_create(user_id)
        event = transition(record)
        await self.repo.save(record)
        if event.new_badges or event.leveled_up:
            logger.info(
                "User %s: +%s XP, badges=%s, level %s -> %s",
                user_id, event.xp_gained, event.new_badges, event.old_level, event.new_level,
            )
        return event

    async def get_record(self, user_id: str) -> UserGamification:
        return await self.repo.get_or_create(user_id)

    async def summary(self, user_id: str) -> GamificationSummary:
        record = await self.repo.get_or_create(user_id)
        return GamificationSummary(
            record=record,
            level=ledger.get_level(record.xp),
            badges=[ledger.BADGES_BY_ID[b] for b in record.badges if b in ledger.BADGES_BY_ID],
        )

    async def lesson_completed(self, user_id: str) -> XpEvent:
        return await self._apply(user_id, lambda g: ledger.award_lesson_complete(g, self.today()))

    async def assignment_completed(self, user_id: str, score: int) -> XpEvent:
        return await self._apply(user_id, lambda g: ledger.award_assignment_complete(g, score, self.today()))

    async def module_completed(self, user_id: str) -> XpEvent:
        return await self._apply(user_id, ledger.award_module_complete)

    async def course_completed(self, user_id: str) -> XpEvent:
        return await self._apply(user_id, ledger.award_course_complete)

    async def duel_won(self, user_id: str) -> XpEvent:
        return await self._apply(user_id, ledger.award_duel_win)

    async def boss_defeated(self, user_id: str, difficulty: str) -> XpEvent:
        return await self._apply(user_id, lambda g: ledger.award_boss_defeat(g, difficulty))

    async def social_joined(self, user_id: str) -> bool:
        record = await self.repo.get_or_create(user_id)
        granted = ledger.award_social_badge(record)
        if granted:
            await self.repo.save(record)
        return granted

    async def daily_login(self, user_id: str) -> Optional[XpEvent]:
        record = await self.repo.get_or_create(user_id)
        event = ledger.record_daily_login(record, self.today())
        if event is not None:
            await self.repo.save(record)
        return event

    async def leaderboard(self, user_ids: Iterable[str]) -> List[LeaderboardEntry]:
        return ledger.class_leaderboard(await self.repo.get_many(user_ids))
