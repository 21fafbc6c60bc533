from typing import Iterable, List

from colearn.gamification.ledger import new_record
from colearn.gamification.models import UserGamification
from colearn.storage import CollectionRepository

GAMIFICATION_KEY = "gamification"


class GamificationRepository(CollectionRepository):
    """All users' gamification records under a single key"""

    async def list_records(self) -> List[UserGamification]:
        return await self._load_models(GAMIFICATION_KEY, UserGamification)

    async def get_or_create(self, user_id: str) -> UserGamification:
        """Records are created lazily with xp=0 on first access"""
        records = await self.list_records()
        for record in records:
            if record.user_id == user_id:
                return record
        fresh = new_record(user_id)
        records.append(fresh)
        await self._save_models(GAMIFICATION_KEY, records)
        return fresh

    async def save(self, record: UserGamification) -> None:
        records = await self.list_records()
        for idx, existing in enumerate(records):
            if existing.user_id == record.user_id:
                records[idx] = record
                break
        else:
            records.append(record)
        await self._save_models(GAMIFICATION_KEY, records)

    async def get_many(self, user_ids: Iterable[str]) -> List[UserGamification]:
        by_id = {record.user_id: record for record in await self.list_records()}
        return [by_id.get(uid) or new_record(uid) for uid in user_ids]
