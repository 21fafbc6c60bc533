import asyncio

import pytest

from colearn.ai import gemini_core
from colearn.ai.gemini_core import GeminiKeyManager
from colearn.ai.services import (
    build_boss_turn, build_course, build_duel_questions, extract_json, module_count_hint,
    TUTOR_CONTEXT_LIMIT,
)
from colearn.errors import AIResponseFormatError, AIServiceError


# ==================== JSON EXTRACTION ====================

def test_extract_json_skips_prose_and_fences():
    assert extract_json('Sure! ```json\n{"a": 1}\n``` enjoy') == {"a": 1}


def test_extract_json_takes_first_balanced_value():
    assert extract_json('{"a": {"b": [1, 2]}} trailing {"c": 3}') == {"a": {"b": [1, 2]}}


def test_extract_json_ignores_brackets_inside_strings():
    text = 'x {"text": "a } tricky ] \\" quote {", "n": 2} y'
    assert extract_json(text) == {"text": 'a } tricky ] " quote {', "n": 2}


def test_extract_json_kind_selects_opener():
    text = 'Questions: [{"question": "1+1?"}]'
    assert extract_json(text, "array") == [{"question": "1+1?"}]
    assert extract_json(text, "object") == {"question": "1+1?"}


def test_extract_json_failures():
    with pytest.raises(AIResponseFormatError):
        extract_json("no json here")
    with pytest.raises(AIResponseFormatError):
        extract_json('{"a": 1')
    with pytest.raises(AIResponseFormatError):
        extract_json("{'single': 'quotes'}")


# ==================== BUILDERS ====================

def test_module_count_hint():
    assert module_count_hint(7) == 4
    assert module_count_hint(150) == 5
    assert module_count_hint(365) == 8


def test_build_course_assigns_ids_and_defaults():
    course = build_course({
        "modules": [
            {"title": "Intro", "lessons": [{"title": "Hello"}, {"content": "text", "duration": 50}]},
            {},
        ],
        "assignments": [
            {"moduleId": "1", "questions": [{"question": "Q?", "options": ["a", "b"], "correctAnswer": "a"}]},
        ],
    }, goal="Learn Go", duration=30)

    assert course.title == "New course"
    assert course.goal == "Learn Go"
    assert [m.id for m in course.modules] == ["0", "1"]
    assert course.modules[1].title == "Module 2"
    assert [l.id for l in course.modules[0].lessons] == ["0-0", "0-1"]
    assert course.modules[0].lessons[0].duration == 30
    assert course.modules[0].lessons[1].title == "Lesson 2"
    assert course.modules[0].lessons[1].duration == 50
    assignment = course.assignments[0]
    assert assignment.id == "assignment-0"
    assert assignment.module_id == "1"
    assert assignment.questions[0].id == "q-0-0"
    assert assignment.questions[0].correct_answer == "a"
    assert course.progress == 0 and course.status == "active"


def test_build_course_requires_modules():
    with pytest.raises(AIResponseFormatError, match="modules"):
        build_course({"title": "x"}, goal="g", duration=10)
    with pytest.raises(AIResponseFormatError):
        build_course([1, 2], goal="g", duration=10)


def test_build_boss_turn():
    turn = build_boss_turn({"response": "Hmm", "playerDamage": "12", "bossDamage": -4})
    assert (turn.player_damage, turn.boss_damage) == (12, 0)
    with pytest.raises(AIResponseFormatError):
        build_boss_turn({"playerDamage": 1})


# ==================== SERVICE ====================

def test_generate_course_parses_model_answer(ai, gemini, make_course_payload):
    gemini.queue(make_course_payload((3, 1)))
    course = asyncio.run(ai.generate_course("Python", 90))

    assert course.title == "Python Basics"
    assert course.description == "Learn {braces}"
    assert [len(m.lessons) for m in course.modules] == [3, 1]
    assert '"Python"' in gemini.prompts[0][0]
    assert "4 modules" in gemini.prompts[0][0]


def test_generate_duel_questions(ai, gemini, make_duel_payload):
    gemini.queue("Here you go: " + make_duel_payload(9))
    questions = asyncio.run(ai.generate_duel_questions("Math", count=7))
    assert len(questions) == 7
    assert questions[0].id == "q-0"
    assert questions[0].correct_answer == "2"


def test_generate_duel_questions_rejects_empty_list(ai, gemini):
    gemini.queue("[]")
    with pytest.raises(AIResponseFormatError):
        asyncio.run(ai.generate_duel_questions("Math"))


def test_tutor_truncates_lesson_and_uses_fallback_keys(ai, gemini):
    gemini.queue("Short answer")
    lesson = "x" * (TUTOR_CONTEXT_LIMIT + 500)

    answer = asyncio.run(ai.ask_tutor(lesson, "What?"))

    prompt, keys = gemini.prompts[0]
    assert answer == "Short answer"
    assert "x" * TUTOR_CONTEXT_LIMIT in prompt
    assert "x" * (TUTOR_CONTEXT_LIMIT + 1) not in prompt
    assert keys == ("tutor", "primary", "backup")


def test_boss_response(ai, gemini):
    gemini.queue('{"response": "Not bad", "playerDamage": 5, "bossDamage": 15}')
    turn = asyncio.run(ai.generate_boss_response("Art", "normal", "Strict Professor", [], "Monet"))
    assert (turn.response, turn.player_damage, turn.boss_damage) == ("Not bad", 5, 15)


# ==================== KEY MANAGER ====================

class _Response:
    def __init__(self, text):
        self.text = text
        self.usage_metadata = None


def test_key_manager_falls_back_in_order(monkeypatch):
    calls = []

    def fake_generate(self, api_key, prompt):
        calls.append(api_key)
        if api_key != "k-backup":
            raise RuntimeError("503 unavailable")
        return _Response(" ok "), " ok "

    monkeypatch.setattr(GeminiKeyManager, "_generate", fake_generate)
    manager = GeminiKeyManager({"primary": "k-main", "tutor": "k-tutor", "backup": "k-backup"})

    assert manager.run_gemini("hi", gemini_core.TUTOR_KEY_ORDER) == "ok"
    assert calls == ["k-tutor", "k-main", "k-backup"]
    stats = manager.get_stats()
    assert stats["tutor"]["failures"] == 1
    assert stats["backup"]["requests_today"] == 1


def test_key_manager_primary_only_does_not_retry(monkeypatch):
    calls = []

    def fake_generate(self, api_key, prompt):
        calls.append(api_key)
        raise RuntimeError("boom")

    monkeypatch.setattr(GeminiKeyManager, "_generate", fake_generate)
    manager = GeminiKeyManager({"primary": "k-main", "backup": "k-backup"})

    with pytest.raises(AIServiceError):
        manager.run_gemini("hi")
    assert calls == ["k-main"]


def test_key_manager_tries_shared_key_once(monkeypatch):
    calls = []

    def fake_generate(self, api_key, prompt):
        calls.append(api_key)
        raise RuntimeError("boom")

    monkeypatch.setattr(GeminiKeyManager, "_generate", fake_generate)
    manager = GeminiKeyManager({"primary": "same", "tutor": "same", "backup": "same"})

    with pytest.raises(AIServiceError):
        manager.run_gemini("hi", gemini_core.TUTOR_KEY_ORDER)
    assert calls == ["same"]


def test_key_manager_without_keys():
    manager = GeminiKeyManager({"primary": ""})
    assert not manager.configured
    with pytest.raises(AIServiceError, match="not configured"):
        manager.run_gemini("hi")


# ==================== WRONG FIELD TYPES ====================

@pytest.mark.parametrize("data", [
    {"title": 5, "modules": []},
    {"title": ["x"], "modules": []},
    {"modules": [{"title": "M", "lessons": [{"title": "L", "content": {"x": 1}}]}]},
    {"modules": [{"title": {"nested": True}}]},
    {"modules": [], "assignments": [{"title": 7, "questions": []}]},
])
def test_build_course_rejects_wrong_field_types(data):
    with pytest.raises(AIResponseFormatError, match="unexpected field types"):
        build_course(data, goal="g", duration=10)


def test_build_course_ignores_non_list_children():
    course = build_course({"modules": [{"lessons": 5}], "assignments": {"a": 1}}, goal="g", duration=10)
    assert course.modules[0].lessons == []
    assert course.assignments == []


def test_build_duel_questions_rejects_wrong_field_types():
    data = [{"question": "1+1?", "options": ["2", "3"], "correctAnswer": "2", "difficulty": 3}]
    with pytest.raises(AIResponseFormatError, match="unexpected field types"):
        build_duel_questions(data)


def test_generate_course_with_wrong_field_types_is_a_format_error(ai, gemini):
    gemini.queue('{"title": ["x"], "modules": []}')
    with pytest.raises(AIResponseFormatError):
        asyncio.run(ai.generate_course("Python", 30))
