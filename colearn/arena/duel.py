"""
Duel resolver.

playing --submit_answer--> ai_turn --resolve_round--> playing | finished

The AI opponent is a weighted coin flip per question. Randomness comes from
an injected random.Random so a seeded or scripted source makes a duel fully
deterministic.
"""

import random
from typing import Dict, List, Optional

from colearn.arena.models import (
    ArenaProfile, DuelDifficulty, DuelQuestion, DuelState, DuelStatus,
    PendingRound, RoundOutcome,
)
from colearn.errors import ConflictError, ValidationError
from colearn.utils import generate_id, iso_now, round_half_up

DUEL_QUESTION_COUNT = 7

HIT_DAMAGE = 20
DOUBLE_MISS_DAMAGE = 8
AI_HIT_POINTS = 10
SHARED_POINTS = 5
COMBO_STEP = 0.15

# Profile rewards: +20/-10 rating, +15 tokens on a win, no token stake.
# win_streak/best_win_streak are kept on top of these as display stats.
WIN_RATING = 20
LOSS_RATING = 10
WIN_TOKENS = 15

AI_OPPONENTS: Dict[str, dict] = {
    DuelDifficulty.EASY.value: {"name": "Rookie Bot", "accuracy": 0.40},
    DuelDifficulty.MEDIUM.value: {"name": "Smarty 3000", "accuracy": 0.65},
    DuelDifficulty.HARD.value: {"name": "AI Genius", "accuracy": 0.85},
}


def new_duel(
    user_id: str,
    topic: str,
    questions: List[DuelQuestion],
    difficulty: DuelDifficulty = DuelDifficulty.MEDIUM,
) -> DuelState:
    if not questions:
        raise ValidationError("A duel needs at least one question")
    difficulty = DuelDifficulty(difficulty)
    return DuelState(
        id=generate_id("DUEL"),
        user_id=user_id,
        topic=topic,
        questions=questions,
        ai_name=AI_OPPONENTS[difficulty.value]["name"],
        ai_difficulty=difficulty,
    )


def current_question(duel: DuelState) -> Optional[DuelQuestion]:
    if duel.index >= len(duel.questions):
        return None
    return duel.questions[duel.index]


def submit_answer(duel: DuelState, answer: str, elapsed_ms: int, rng: random.Random) -> PendingRound:
    """Grade the player's answer and roll the AI; damage waits for resolve_round"""
    if duel.status != DuelStatus.PLAYING:
        raise ConflictError("Duel is not waiting for an answer")
    question = current_question(duel)
    if question is None:
        raise ConflictError("No questions left in this duel")

    accuracy = AI_OPPONENTS[DuelDifficulty(duel.ai_difficulty).value]["accuracy"]
    ai_correct = rng.random() < accuracy
    # pacing only, no effect on scoring
    ai_think_ms = int(800 + rng.random() * 600)

    pending = PendingRound(
        answer=answer,
        elapsed_ms=max(0, elapsed_ms),
        player_correct=answer == question.correct_answer,
        ai_correct=ai_correct,
        ai_think_ms=ai_think_ms,
    )
    duel.pending = pending
    duel.status = DuelStatus.AI_TURN
    return pending


def resolve_round(duel: DuelState) -> RoundOutcome:
    """Apply damage and scoring for the pending round, then advance"""
    if duel.status != DuelStatus.AI_TURN or duel.pending is None:
        raise ConflictError("No round awaiting resolution")

    pending = duel.pending
    question = duel.questions[duel.index]
    seconds = pending.elapsed_ms // 1000
    outcome = RoundOutcome(
        question_id=question.id,
        answer=pending.answer,
        elapsed_ms=pending.elapsed_ms,
        player_correct=pending.player_correct,
        ai_correct=pending.ai_correct,
    )

    if pending.player_correct and not pending.ai_correct:
        duel.ai_hp = max(0, duel.ai_hp - HIT_DAMAGE)
        duel.combo += 1
        bonus = max(0, 15 - seconds)
        outcome.player_points = round_half_up((10 + bonus) * (1 + duel.combo * COMBO_STEP))
        outcome.ai_damage = HIT_DAMAGE
    elif not pending.player_correct and pending.ai_correct:
        duel.player_hp = max(0, duel.player_hp - HIT_DAMAGE)
        duel.combo = 0
        outcome.ai_points = AI_HIT_POINTS
        outcome.player_damage = HIT_DAMAGE
    elif pending.player_correct and pending.ai_correct:
        bonus = max(0, 10 - seconds)
        outcome.player_points = SHARED_POINTS + bonus
        outcome.ai_points = SHARED_POINTS
        duel.combo += 1
    else:
        duel.player_hp = max(0, duel.player_hp - DOUBLE_MISS_DAMAGE)
        duel.ai_hp = max(0, duel.ai_hp - DOUBLE_MISS_DAMAGE)
        duel.combo = 0
        outcome.player_damage = DOUBLE_MISS_DAMAGE
        outcome.ai_damage = DOUBLE_MISS_DAMAGE

    duel.player_score += outcome.player_points
    duel.ai_score += outcome.ai_points
    duel.max_combo = max(duel.max_combo, duel.combo)
    duel.rounds.append(outcome)
    duel.pending = None
    duel.index += 1

    if duel.index >= len(duel.questions) or duel.player_hp <= 0 or duel.ai_hp <= 0:
        duel.status = DuelStatus.FINISHED
        duel.winner = duel_winner(duel)
        duel.finished_at = iso_now()
    else:
        duel.status = DuelStatus.PLAYING
    return outcome


def play_round(duel: DuelState, answer: str, elapsed_ms: int, rng: random.Random) -> RoundOutcome:
    submit_answer(duel, answer, elapsed_ms, rng)
    return resolve_round(duel)


def duel_winner(duel: DuelState) -> str:
    """Higher HP wins; equal HP goes to the strictly higher score, else the AI"""
    if duel.player_hp > duel.ai_hp:
        return "player"
    if duel.player_hp == duel.ai_hp and duel.player_score > duel.ai_score:
        return "player"
    return "ai"


def apply_duel_result(profile: ArenaProfile, won: bool) -> None:
    if won:
        profile.duels_won += 1
        profile.arena_rating += WIN_RATING
        profile.arena_tokens += WIN_TOKENS
        profile.win_streak += 1
        profile.best_win_streak = max(profile.best_win_streak, profile.win_streak)
    else:
        profile.duels_lost += 1
        profile.arena_rating = max(0, profile.arena_rating - LOSS_RATING)
        profile.win_streak = 0
