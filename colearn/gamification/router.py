from fastapi import APIRouter, Depends
from typing import List

from colearn.dependencies import get_current_user_id, get_gamification
from colearn.gamification import ledger
from colearn.gamification.models import Badge, GamificationSummary, Level
from colearn.gamification.service import GamificationService

router = APIRouter(prefix="/gamification", tags=["Gamification"])


@router.get("/me", response_model=GamificationSummary)
async def get_my_progress(
    user_id: str = Depends(get_current_user_id),
    gamification: GamificationService = Depends(get_gamification)
):
    """XP, level, streak and earned badges"""
    return await gamification.summary(user_id)


@router.post("/daily-login")
async def daily_login(
    user_id: str = Depends(get_current_user_id),
    gamification: GamificationService = Depends(get_gamification)
):
    """
    Record today's visit
    At most once per day: streak update and +10 XP; later calls return awarded=false
    """
    event = await gamification.daily_login(user_id)
    return {"awarded": event is not None, "event": event.model_dump() if event else None}


@router.get("/badges", response_model=List[Badge])
async def list_badges():
    return ledger.ALL_BADGES


@router.get("/levels", response_model=List[Level])
async def list_levels():
    return [ledger.get_level(threshold) for _, threshold, _ in ledger.LEVELS]
