"""
Boss fight resolver.

in_progress --apply_boss_turn--> in_progress | victory | defeat

Victory is checked before defeat, so a last-round knockout still wins.
"""

from typing import Dict

from colearn.arena.models import (
    ArenaProfile, BossDifficulty, BossFight, BossMessage, BossStatus, BossTurn
)
from colearn.errors import ConflictError
from colearn.utils import generate_id

PLAYER_HP = 100

BOSSES: Dict[str, dict] = {
    BossDifficulty.NORMAL.value: {"name": "Strict Professor", "hp": 100, "max_rounds": 6, "xp": 150},
    BossDifficulty.HARD.value: {"name": "Evil Expert", "hp": 120, "max_rounds": 7, "xp": 200},
    BossDifficulty.NIGHTMARE.value: {"name": "Knowledge Master", "hp": 150, "max_rounds": 8, "xp": 300},
}


def boss_for(difficulty) -> dict:
    return BOSSES[BossDifficulty(difficulty).value]


def new_boss_fight(
    user_id: str, topic: str, difficulty: BossDifficulty, intro: str, language: str = "English"
) -> BossFight:
    difficulty = BossDifficulty(difficulty)
    boss = boss_for(difficulty)
    return BossFight(
        id=generate_id("BOSS"),
        user_id=user_id,
        topic=topic,
        difficulty=difficulty,
        boss_name=boss["name"],
        boss_hp=boss["hp"],
        boss_max_hp=boss["hp"],
        player_hp=PLAYER_HP,
        player_max_hp=PLAYER_HP,
        max_rounds=boss["max_rounds"],
        xp_reward=boss["xp"],
        language=language,
        messages=[BossMessage(role="boss", content=intro)],
    )


def apply_boss_turn(fight: BossFight, player_input: str, turn: BossTurn) -> BossStatus:
    if fight.status != BossStatus.IN_PROGRESS:
        raise ConflictError("This boss fight is already over")

    player_damage = max(0, turn.player_damage)
    boss_damage = max(0, turn.boss_damage)

    fight.messages.append(BossMessage(role="player", content=player_input))
    fight.messages.append(BossMessage(role="boss", content=turn.response, damage_dealt=player_damage))
    fight.player_hp = max(0, fight.player_hp - player_damage)
    fight.boss_hp = max(0, fight.boss_hp - boss_damage)
    fight.round += 1

    if fight.boss_hp <= 0:
        fight.status = BossStatus.VICTORY
    elif fight.player_hp <= 0 or fight.round > fight.max_rounds:
        fight.status = BossStatus.DEFEAT
    return fight.status


def apply_boss_victory(profile: ArenaProfile) -> None:
    profile.bosses_defeated += 1
