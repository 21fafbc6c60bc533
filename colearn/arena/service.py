"""
Arena service: duels and boss fights against the AI.
Resolution rules live in duel.py and boss.py; this module loads state,
calls the AI, applies rewards and saves the result.
"""

import logging
import random
from typing import List, Set

from colearn.ai.services import AIService
from colearn.arena import boss, duel
from colearn.arena.database import ArenaRepository
from colearn.arena.models import (
    ArenaLeaderboardEntry, ArenaProfile, BossFight, BossStartRequest, BossStatus,
    BossTurnResult, DuelAnswerRequest, DuelAnswerResult, DuelStartRequest,
    DuelState, DuelStatus,
)
from colearn.auth.database import UserRepository
from colearn.errors import ConflictError, NotFoundError
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 20

# boss fights currently waiting on the AI
_boss_turns_in_flight: Set[str] = set()

# ==================== PROFILE ====================

async def get_profile(store: DocumentStore, user_id: str) -> ArenaProfile:
    return await ArenaRepository(store).get_or_create_profile(user_id)


async def get_leaderboard(store: DocumentStore) -> List[ArenaLeaderboardEntry]:
    profiles = await ArenaRepository(store).list_profiles()
    top = sorted(profiles, key=lambda p: p.arena_rating, reverse=True)[:LEADERBOARD_SIZE]
    names = {u.id: u.name for u in await UserRepository(store).list_users()}
    return [
        ArenaLeaderboardEntry(
            user_id=p.user_id,
            name=names.get(p.user_id),
            arena_rating=p.arena_rating,
            duels_won=p.duels_won,
            bosses_defeated=p.bosses_defeated,
        )
        for p in top
    ]

# ==================== DUELS ====================

async def start_duel(
    store: DocumentStore, ai: AIService, user_id: str, data: DuelStartRequest
) -> DuelState:
    questions = await ai.generate_duel_questions(
        data.topic, duel.DUEL_QUESTION_COUNT, data.difficulty.value, data.language
    )
    state = duel.new_duel(user_id, data.topic, questions, data.difficulty)
    await ArenaRepository(store).save_duel(state)
    logger.info("Duel %s started: %s vs %s", state.id, user_id, state.ai_name)
    return state


async def get_duel(store: DocumentStore, user_id: str, duel_id: str) -> DuelState:
    state = await ArenaRepository(store).get_duel(duel_id)
    if not state or state.user_id != user_id:
        raise NotFoundError("Duel not found")
    return state


async def answer_duel(
    store: DocumentStore,
    gamification: GamificationService,
    rng: random.Random,
    user_id: str,
    duel_id: str,
    data: DuelAnswerRequest
) -> DuelAnswerResult:
    repo = ArenaRepository(store)
    state = await get_duel(store, user_id, duel_id)

    pending = duel.submit_answer(state, data.answer, data.elapsed_ms, rng)
    outcome = duel.resolve_round(state)

    profile = None
    xp_event = None
    if state.status == DuelStatus.FINISHED:
        won = state.winner == "player"
        profile = await repo.get_or_create_profile(user_id)
        duel.apply_duel_result(profile, won)
        await repo.save_profile(profile)
        if won:
            xp_event = await gamification.duel_won(user_id)
        logger.info("Duel %s finished, winner=%s", state.id, state.winner)

    await repo.save_duel(state)
    return DuelAnswerResult(
        duel=state, outcome=outcome, ai_think_ms=pending.ai_think_ms,
        profile=profile, xp_event=xp_event,
    )


async def duel_history(store: DocumentStore, user_id: str) -> List[DuelState]:
    return await ArenaRepository(store).duel_history(user_id)

# ==================== BOSS FIGHTS ====================

async def start_boss_fight(
    store: DocumentStore, ai: AIService, user_id: str, data: BossStartRequest
) -> BossFight:
    boss_name = boss.boss_for(data.difficulty)["name"]
    intro = await ai.generate_boss_intro(data.topic, data.difficulty.value, boss_name, data.language)
    fight = boss.new_boss_fight(user_id, data.topic, data.difficulty, intro, data.language)
    await ArenaRepository(store).save_boss_fight(fight)
    logger.info("Boss fight %s started: %s vs %s", fight.id, user_id, boss_name)
    return fight


async def get_boss_fight(store: DocumentStore, user_id: str, fight_id: str) -> BossFight:
    fight = await ArenaRepository(store).get_boss_fight(fight_id)
    if not fight or fight.user_id != user_id:
        raise NotFoundError("Boss fight not found")
    return fight


async def send_boss_message(
    store: DocumentStore,
    ai: AIService,
    gamification: GamificationService,
    user_id: str,
    fight_id: str,
    message: str
) -> BossTurnResult:
    """
    One boss round
    A second message for the same fight is rejected while the AI is still
    answering. If the AI call fails the fight is left untouched.
    """
    repo = ArenaRepository(store)
    fight = await get_boss_fight(store, user_id, fight_id)
    if fight.status != BossStatus.IN_PROGRESS:
        raise ConflictError("This boss fight is already over")
    if fight_id in _boss_turns_in_flight:
        raise ConflictError("The boss is still answering")

    _boss_turns_in_flight.add(fight_id)
    try:
        turn = await ai.generate_boss_response(
            fight.topic, fight.difficulty.value, fight.boss_name,
            fight.messages, message, fight.language,
        )
    finally:
        _boss_turns_in_flight.discard(fight_id)

    status = boss.apply_boss_turn(fight, message, turn)

    profile = None
    xp_event = None
    if status == BossStatus.VICTORY:
        profile = await repo.get_or_create_profile(user_id)
        boss.apply_boss_victory(profile)
        await repo.save_profile(profile)
        xp_event = await gamification.boss_defeated(user_id, fight.difficulty.value)
        logger.info("Boss fight %s won by %s", fight.id, user_id)

    await repo.save_boss_fight(fight)
    return BossTurnResult(fight=fight, profile=profile, xp_event=xp_event)


async def boss_fight_history(store: DocumentStore, user_id: str) -> List[BossFight]:
    return await ArenaRepository(store).boss_fight_history(user_id)
