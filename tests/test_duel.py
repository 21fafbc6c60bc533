import pytest

from colearn.arena import duel
from colearn.arena.models import ArenaProfile, DuelDifficulty, DuelQuestion, DuelStatus
from colearn.errors import ConflictError, ValidationError

AI_WRONG = 0.99
AI_RIGHT = 0.01


def questions(count):
    return [
        DuelQuestion(id=f"q-{n}", question=f"Q{n}", options=["a", "b", "c", "d"], correct_answer="a")
        for n in range(count)
    ]


def test_math_duel_scenario(rng):
    state = duel.new_duel("u1", "Math", questions(1), DuelDifficulty.MEDIUM)
    rng.script(AI_WRONG, 0.0)

    outcome = duel.play_round(state, "a", 2000, rng)

    assert state.ai_hp == 80
    assert state.player_hp == 100
    assert state.combo == 1
    # (10 + 13) * 1.15 = 26.45
    assert outcome.player_points == 26
    assert state.player_score == 26
    assert state.status == DuelStatus.FINISHED
    assert state.winner == "player"
    assert state.finished_at is not None


def test_opponents_by_difficulty():
    assert duel.AI_OPPONENTS["easy"] == {"name": "Rookie Bot", "accuracy": 0.40}
    assert duel.AI_OPPONENTS["medium"]["accuracy"] == 0.65
    assert duel.AI_OPPONENTS["hard"]["accuracy"] == 0.85
    assert duel.new_duel("u1", "Math", questions(1), DuelDifficulty.HARD).ai_name == "AI Genius"


def test_ai_roll_uses_accuracy_threshold(rng):
    state = duel.new_duel("u1", "Math", questions(2), DuelDifficulty.EASY)
    rng.script(0.39, 0.0)
    assert duel.submit_answer(state, "a", 0, rng).ai_correct is True
    duel.resolve_round(state)

    rng.script(0.40, 0.0)
    assert duel.submit_answer(state, "a", 0, rng).ai_correct is False


def test_player_wrong_ai_right(rng):
    state = duel.new_duel("u1", "Math", questions(3))
    state.combo = 2
    rng.script(AI_RIGHT, 0.0)

    outcome = duel.play_round(state, "b", 1000, rng)

    assert state.player_hp == 80
    assert state.ai_score == 10
    assert state.combo == 0
    assert outcome.player_damage == 20
    assert state.status == DuelStatus.PLAYING


def test_both_correct(rng):
    state = duel.new_duel("u1", "Math", questions(3))
    rng.script(AI_RIGHT, 0.0)

    outcome = duel.play_round(state, "a", 3000, rng)

    assert outcome.player_points == 5 + 7
    assert state.ai_score == 5
    assert state.combo == 1
    assert (state.player_hp, state.ai_hp) == (100, 100)


def test_both_wrong(rng):
    state = duel.new_duel("u1", "Math", questions(3))
    state.combo = 3
    rng.script(AI_WRONG, 0.0)

    duel.play_round(state, "c", 0, rng)

    assert (state.player_hp, state.ai_hp) == (92, 92)
    assert state.combo == 0
    assert state.player_score == 0 and state.ai_score == 0


def test_combo_multiplier_rounds_half_up(rng):
    state = duel.new_duel("u1", "Math", questions(3))
    rng.script(AI_WRONG, 0.0, AI_WRONG, 0.0)

    first = duel.play_round(state, "a", 0, rng)
    second = duel.play_round(state, "a", 0, rng)

    assert first.player_points == 29   # 25 * 1.15 = 28.75
    assert second.player_points == 33  # 25 * 1.30 = 32.5
    assert state.max_combo == 2
    assert state.index == 2
    assert state.status == DuelStatus.PLAYING


def test_time_bonus_never_negative(rng):
    state = duel.new_duel("u1", "Math", questions(2))
    state.combo = 1
    rng.script(AI_WRONG, 0.0)
    outcome = duel.play_round(state, "a", 60000, rng)
    assert outcome.player_points == 13  # 10 * 1.3


def test_submit_moves_to_ai_turn(rng):
    state = duel.new_duel("u1", "Math", questions(2))
    rng.script(AI_WRONG, 0.5)

    pending = duel.submit_answer(state, "a", 0, rng)

    assert state.status == DuelStatus.AI_TURN
    assert pending.ai_think_ms == 1100
    with pytest.raises(ConflictError):
        duel.submit_answer(state, "a", 0, rng)

    duel.resolve_round(state)
    assert state.pending is None
    with pytest.raises(ConflictError):
        duel.resolve_round(state)


def test_finished_duel_rejects_answers(rng):
    state = duel.new_duel("u1", "Math", questions(1))
    duel.play_round(state, "a", 0, rng)
    assert state.status == DuelStatus.FINISHED
    with pytest.raises(ConflictError):
        duel.play_round(state, "a", 0, rng)


def test_duel_ends_when_player_hp_runs_out(rng):
    state = duel.new_duel("u1", "Math", questions(7))
    for _ in range(5):
        rng.script(AI_RIGHT, 0.0)
        duel.play_round(state, "wrong", 0, rng)

    assert state.player_hp == 0
    assert state.status == DuelStatus.FINISHED
    assert state.index == 5
    assert state.winner == "ai"


def test_winner_tie_breaks():
    state = duel.new_duel("u1", "Math", questions(1))
    state.player_hp = state.ai_hp = 60
    state.player_score, state.ai_score = 30, 20
    assert duel.duel_winner(state) == "player"

    state.player_score = 20
    assert duel.duel_winner(state) == "ai"

    state.player_hp = 40
    state.player_score = 500
    assert duel.duel_winner(state) == "ai"


def test_duel_needs_questions():
    with pytest.raises(ValidationError):
        duel.new_duel("u1", "Math", [])


def test_duel_rewards():
    profile = ArenaProfile(user_id="u1")
    duel.apply_duel_result(profile, True)
    duel.apply_duel_result(profile, True)
    assert profile.arena_rating == 1040
    assert profile.arena_tokens == 130
    assert profile.duels_won == 2
    assert profile.best_win_streak == 2

    duel.apply_duel_result(profile, False)
    assert profile.arena_rating == 1030
    assert profile.duels_lost == 1
    assert profile.win_streak == 0
    assert profile.best_win_streak == 2
    assert profile.arena_tokens == 130


def test_rating_floors_at_zero():
    profile = ArenaProfile(user_id="u1", arena_rating=5)
    duel.apply_duel_result(profile, False)
    assert profile.arena_rating == 0
