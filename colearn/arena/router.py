import random
from fastapi import APIRouter, Depends
from typing import List

from colearn.ai.services import AIService
from colearn.arena import service
from colearn.arena.models import (
    ArenaLeaderboardEntry, ArenaProfile, BossFight, BossMessageRequest, BossStartRequest,
    BossTurnResult, DuelAnswerRequest, DuelAnswerResult, DuelStartRequest, DuelState,
)
from colearn.dependencies import (
    get_ai_service, get_current_user_id, get_gamification, get_rng, get_store
)
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore

router = APIRouter(prefix="/arena", tags=["Arena"])

# ==================== PROFILE ====================

@router.get("/profile", response_model=ArenaProfile)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_profile(store, user_id)


@router.get("/leaderboard", response_model=List[ArenaLeaderboardEntry])
async def get_leaderboard(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Top 20 by arena rating"""
    return await service.get_leaderboard(store)

# ==================== DUELS ====================

@router.post("/duels", response_model=DuelState, status_code=201)
async def start_duel(
    data: DuelStartRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service)
):
    """Start a 7-question duel against an AI opponent"""
    return await service.start_duel(store, ai, user_id, data)


@router.get("/duels", response_model=List[DuelState])
async def duel_history(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.duel_history(store, user_id)


@router.get("/duels/{duel_id}", response_model=DuelState)
async def get_duel(
    duel_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_duel(store, user_id, duel_id)


@router.post("/duels/{duel_id}/answer", response_model=DuelAnswerResult)
async def answer_duel(
    duel_id: str,
    data: DuelAnswerRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification),
    rng: random.Random = Depends(get_rng)
):
    """
    Answer the current question

    elapsed_ms is measured by the client. Errors: duel finished (409)
    """
    return await service.answer_duel(store, gamification, rng, user_id, duel_id, data)

# ==================== BOSS FIGHTS ====================

@router.post("/bosses", response_model=BossFight, status_code=201)
async def start_boss_fight(
    data: BossStartRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service)
):
    return await service.start_boss_fight(store, ai, user_id, data)


@router.get("/bosses", response_model=List[BossFight])
async def boss_fight_history(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.boss_fight_history(store, user_id)


@router.get("/bosses/{fight_id}", response_model=BossFight)
async def get_boss_fight(
    fight_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_boss_fight(store, user_id, fight_id)


@router.post("/bosses/{fight_id}/message", response_model=BossTurnResult)
async def send_boss_message(
    fight_id: str,
    data: BossMessageRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service),
    gamification: GamificationService = Depends(get_gamification)
):
    """
    Answer the boss

    Errors: fight over or previous message still pending (409), AI failure (502)
    """
    return await service.send_boss_message(store, ai, gamification, user_id, fight_id, data.message)
