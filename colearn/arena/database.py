from typing import List, Optional

from colearn.arena.models import ArenaProfile, BossFight, DuelState
from colearn.storage import CollectionRepository

PROFILES_KEY = "arena_profiles"
DUELS_KEY = "arena_duels"
BOSS_FIGHTS_KEY = "arena_bossfights"


class ArenaRepository(CollectionRepository):
    """Arena profiles, duels and boss fights of all users"""

    # ==================== PROFILES ====================

    async def list_profiles(self) -> List[ArenaProfile]:
        return await self._load_models(PROFILES_KEY, ArenaProfile)

    async def get_or_create_profile(self, user_id: str) -> ArenaProfile:
        profiles = await self.list_profiles()
        for profile in profiles:
            if profile.user_id == user_id:
                return profile
        fresh = ArenaProfile(user_id=user_id)
        profiles.append(fresh)
        await self._save_models(PROFILES_KEY, profiles)
        return fresh

    async def save_profile(self, profile: ArenaProfile) -> None:
        await self._upsert(PROFILES_KEY, ArenaProfile, profile, "user_id")

    # ==================== DUELS ====================

    async def get_duel(self, duel_id: str) -> Optional[DuelState]:
        for duel in await self._load_models(DUELS_KEY, DuelState):
            if duel.id == duel_id:
                return duel
        return None

    async def save_duel(self, duel: DuelState) -> None:
        await self._upsert(DUELS_KEY, DuelState, duel, "id")

    async def duel_history(self, user_id: str) -> List[DuelState]:
        duels = [d for d in await self._load_models(DUELS_KEY, DuelState) if d.user_id == user_id]
        return sorted(duels, key=lambda d: d.created_at, reverse=True)

    # ==================== BOSS FIGHTS ====================

    async def get_boss_fight(self, fight_id: str) -> Optional[BossFight]:
        for fight in await self._load_models(BOSS_FIGHTS_KEY, BossFight):
            if fight.id == fight_id:
                return fight
        return None

    async def save_boss_fight(self, fight: BossFight) -> None:
        await self._upsert(BOSS_FIGHTS_KEY, BossFight, fight, "id")

    async def boss_fight_history(self, user_id: str) -> List[BossFight]:
        fights = [f for f in await self._load_models(BOSS_FIGHTS_KEY, BossFight) if f.user_id == user_id]
        return sorted(fights, key=lambda f: f.created_at, reverse=True)

    async def _upsert(self, key, model, record, id_field: str) -> None:
        records = await self._load_models(key, model)
        record_id = getattr(record, id_field)
        for idx, existing in enumerate(records):
            if getattr(existing, id_field) == record_id:
                records[idx] = record
                break
        else:
            records.append(record)
        await self._save_models(key, records)
