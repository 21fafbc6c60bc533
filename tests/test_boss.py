import asyncio

import pytest

from colearn.arena import boss, service
from colearn.arena.database import ArenaRepository
from colearn.arena.models import ArenaProfile, BossDifficulty, BossStatus, BossTurn
from colearn.errors import ConflictError
from colearn.gamification.service import GamificationService


def fight(difficulty=BossDifficulty.NORMAL):
    return boss.new_boss_fight("u1", "History", difficulty, "I am your examiner.")


def test_normal_boss_scenario():
    f = fight()
    assert f.boss_hp == 100
    assert f.max_rounds == 6
    assert f.xp_reward == 150
    assert f.round == 1
    assert f.messages[0].role == "boss"

    status = boss.apply_boss_turn(f, "my answer", BossTurn(response="Ouch", player_damage=0, boss_damage=100))

    assert f.boss_hp == 0
    assert status == BossStatus.VICTORY
    assert f.round == 2


def test_boss_table():
    hard = fight(BossDifficulty.HARD)
    nightmare = fight(BossDifficulty.NIGHTMARE)
    assert (hard.boss_name, hard.boss_hp, hard.max_rounds, hard.xp_reward) == ("Evil Expert", 120, 7, 200)
    assert (nightmare.boss_name, nightmare.boss_hp, nightmare.max_rounds, nightmare.xp_reward) == (
        "Knowledge Master", 150, 8, 300
    )


def test_turn_appends_transcript_and_damage():
    f = fight()
    boss.apply_boss_turn(f, "answer", BossTurn(response="Weak!", player_damage=25, boss_damage=5))

    assert f.player_hp == 75
    assert f.boss_hp == 95
    assert [m.role for m in f.messages] == ["boss", "player", "boss"]
    assert f.messages[-1].damage_dealt == 25
    assert f.status == BossStatus.IN_PROGRESS


def test_defeat_when_rounds_run_out():
    f = fight()
    for _ in range(5):
        boss.apply_boss_turn(f, "meh", BossTurn(response="Next", player_damage=1, boss_damage=1))
    assert f.status == BossStatus.IN_PROGRESS
    assert f.round == 6

    boss.apply_boss_turn(f, "meh", BossTurn(response="Time!", player_damage=1, boss_damage=1))
    assert f.round == 7
    assert f.status == BossStatus.DEFEAT


def test_defeat_when_player_hp_runs_out():
    f = fight()
    boss.apply_boss_turn(f, "?", BossTurn(response="Wrong", player_damage=100, boss_damage=0))
    assert f.player_hp == 0
    assert f.status == BossStatus.DEFEAT


def test_victory_checked_before_defeat():
    f = fight()
    f.round = 6
    f.player_hp = 10
    boss.apply_boss_turn(f, "final", BossTurn(response="No!", player_damage=25, boss_damage=100))
    assert f.player_hp == 0
    assert f.round == 7
    assert f.status == BossStatus.VICTORY


def test_negative_damage_is_ignored():
    f = fight()
    boss.apply_boss_turn(f, "x", BossTurn(response="?", player_damage=-10, boss_damage=-10))
    assert (f.player_hp, f.boss_hp) == (100, 100)


def test_finished_fight_rejects_turns():
    f = fight()
    boss.apply_boss_turn(f, "x", BossTurn(response="argh", boss_damage=100))
    with pytest.raises(ConflictError):
        boss.apply_boss_turn(f, "again", BossTurn(response="?"))


def test_victory_counts_on_profile():
    profile = ArenaProfile(user_id="u1")
    boss.apply_boss_victory(profile)
    assert profile.bosses_defeated == 1


# ==================== SERVICE ====================

class BlockingBossAI:
    """Holds generate_boss_response open until released"""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate_boss_response(self, *args, **kwargs):
        self.started.set()
        await self.release.wait()
        return BossTurn(response="Hmm, acceptable.", player_damage=0, boss_damage=10)


def test_second_message_rejected_while_boss_is_answering(store):
    async def scenario():
        f = fight()
        await ArenaRepository(store).save_boss_fight(f)
        ai = BlockingBossAI()
        gamification = GamificationService(store)

        first = asyncio.create_task(
            service.send_boss_message(store, ai, gamification, "u1", f.id, "first answer")
        )
        await ai.started.wait()

        with pytest.raises(ConflictError, match="The boss is still answering"):
            await service.send_boss_message(store, ai, gamification, "u1", f.id, "second answer")

        ai.release.set()
        result = await first
        return result, await ArenaRepository(store).get_boss_fight(f.id)

    result, saved = asyncio.run(scenario())

    assert result.fight.round == 2
    assert result.fight.boss_hp == 90
    assert [m.content for m in saved.messages if m.role == "player"] == ["first answer"]
    assert saved.id not in service._boss_turns_in_flight
