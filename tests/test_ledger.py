from datetime import date, timedelta

from colearn.gamification import ledger
from colearn.gamification.models import UserGamification

TODAY = date(2026, 3, 10)


def record(**kwargs) -> UserGamification:
    return UserGamification(user_id="u1", **kwargs)


def test_level_scenario_250_xp():
    level = ledger.get_level(250)
    assert level.level == 2
    assert level.next_level_xp == 300
    assert level.progress == 75


def test_level_boundaries():
    assert ledger.get_level(0).level == 1
    assert ledger.get_level(0).progress == 0
    assert ledger.get_level(99).level == 1
    assert ledger.get_level(100).level == 2
    assert ledger.get_level(2499).level == 6


def test_top_level_saturates():
    level = ledger.get_level(9000)
    assert level.level == 7
    assert level.progress == 100


def test_daily_login_after_yesterday_increments_streak():
    g = record(streak=4, last_active_date=(TODAY - timedelta(days=1)).isoformat())
    event = ledger.record_daily_login(g, TODAY)
    assert event is not None
    assert event.xp_gained == 10
    assert g.streak == 5
    assert g.xp == 10
    assert g.last_active_date == TODAY.isoformat()


def test_daily_login_after_gap_resets_streak():
    g = record(streak=9, last_active_date=(TODAY - timedelta(days=2)).isoformat())
    ledger.record_daily_login(g, TODAY)
    assert g.streak == 1


def test_daily_login_twice_is_a_noop():
    g = record(streak=2, xp=40, lessons_today=3, last_active_date=TODAY.isoformat())
    assert ledger.record_daily_login(g, TODAY) is None
    assert (g.streak, g.xp, g.lessons_today) == (2, 40, 3)


def test_first_daily_login_ever():
    g = record()
    ledger.record_daily_login(g, TODAY)
    assert g.streak == 1


def test_lesson_award_grants_first_lesson_once():
    g = record()
    first = ledger.award_lesson_complete(g, TODAY)
    assert first.xp_gained == 25
    assert first.new_badges == ["first_lesson"]

    second = ledger.award_lesson_complete(g, TODAY)
    assert second.new_badges == []
    assert g.badges.count("first_lesson") == 1
    assert g.total_lessons == 2
    assert g.lessons_today == 2


def test_badges_never_duplicate():
    g = record(total_lessons=20, streak=40, lessons_today=10, last_active_date=TODAY.isoformat())
    for _ in range(3):
        ledger.award_lesson_complete(g, TODAY)
        ledger.award_module_complete(g)
        ledger.award_assignment_complete(g, 100, TODAY)
        ledger.award_course_complete(g)
        ledger.award_duel_win(g)
        ledger.award_boss_defeat(g, "hard")
        ledger.award_social_badge(g)
    assert len(g.badges) == len(set(g.badges))
    assert set(g.badges) == set(ledger.BADGES_BY_ID)


def test_assignment_xp_tiers():
    assert ledger.assignment_xp(100) == 100
    assert ledger.assignment_xp(99) == 75
    assert ledger.assignment_xp(80) == 75
    assert ledger.assignment_xp(79) == 50
    assert ledger.assignment_xp(0) == 50


def test_perfect_score_badge():
    g = record()
    event = ledger.award_assignment_complete(g, 100, TODAY)
    assert "perfect_score" in event.new_badges
    assert g.total_assignments == 1

    again = ledger.award_assignment_complete(g, 100, TODAY)
    assert "perfect_score" not in again.new_badges


def test_module_and_course_awards():
    g = record()
    module_event = ledger.award_module_complete(g)
    assert module_event.xp_gained == 200
    assert module_event.new_badges == ["module_master"]

    course_event = ledger.award_course_complete(g)
    assert course_event.xp_gained == 500
    assert "first_course" in course_event.new_badges
    assert g.total_courses == 1
    assert course_event.leveled_up
    assert (course_event.old_level, course_event.new_level) == (2, 4)


def test_speed_learner_after_five_lessons_in_a_day():
    g = record()
    for _ in range(4):
        ledger.award_lesson_complete(g, TODAY)
    assert "speed_learner" not in g.badges
    event = ledger.award_lesson_complete(g, TODAY)
    assert "speed_learner" in event.new_badges


def test_daily_lesson_counter_resets_on_new_day():
    g = record()
    for _ in range(3):
        ledger.award_lesson_complete(g, TODAY)
    ledger.award_lesson_complete(g, TODAY + timedelta(days=1))
    assert g.lessons_today == 1
    assert g.streak == 2


def test_streak_badges():
    g = record(streak=2, last_active_date=(TODAY - timedelta(days=1)).isoformat())
    event = ledger.award_lesson_complete(g, TODAY)
    assert g.streak == 3
    assert "streak_3" in event.new_badges


def test_arena_awards():
    g = record()
    duel = ledger.award_duel_win(g)
    assert duel.xp_gained == 50
    assert duel.new_badges == ["duelist"]

    boss = ledger.award_boss_defeat(g, "nightmare")
    assert boss.xp_gained == 300
    assert boss.new_badges == ["boss_slayer"]


def test_social_badge_once():
    g = record()
    assert ledger.award_social_badge(g) is True
    assert ledger.award_social_badge(g) is False
    assert g.badges == ["social"]


def test_class_leaderboard_sorted_by_xp():
    board = ledger.class_leaderboard([
        UserGamification(user_id="a", xp=50),
        UserGamification(user_id="b", xp=700),
        UserGamification(user_id="c", xp=120),
    ])
    assert [e.user_id for e in board] == ["b", "c", "a"]
    assert board[0].level == 4
