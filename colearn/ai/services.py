"""
AI collaborator.
Builds prompts, calls Gemini off the event loop and turns the answers into
domain objects. Nothing here persists anything.
"""

import asyncio
import json
import logging
import math
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from colearn.ai.gemini_core import TUTOR_KEY_ORDER, GeminiKeyManager
from colearn.ai.prompts import PROMPTS
from colearn.arena.models import BossMessage, BossTurn, DuelQuestion
from colearn.courses.models import Assignment, Course, Lesson, Module, Question
from colearn.errors import AIResponseFormatError
from colearn.utils import generate_id

logger = logging.getLogger(__name__)

TUTOR_CONTEXT_LIMIT = 3000


# ==================== JSON EXTRACTION ====================

def extract_json(text: str, kind: Optional[str] = None) -> Any:
    """
    Parse the first balanced {...} or [...] in a model answer.
    kind="object" or kind="array" restricts which bracket may open it.
    Braces inside string literals are ignored.
    """
    openers = {"object": "{", "array": "["}.get(kind, "{[")
    start = next((i for i, ch in enumerate(text) if ch in openers), -1)
    if start < 0:
        raise AIResponseFormatError("AI response did not contain JSON")

    closing = {"{": "}", "[": "]"}
    stack = []
    in_string = False
    escaped = False
    end = -1
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in closing:
            stack.append(closing[ch])
        elif ch in "}]":
            if not stack or stack.pop() != ch:
                break
            if not stack:
                end = i
                break

    if end < 0:
        raise AIResponseFormatError("AI response contained unbalanced JSON")

    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.error("Failed to parse AI JSON: %s", e)
        raise AIResponseFormatError(f"Could not parse AI response: {e}")


def module_count_hint(duration: int) -> int:
    return max(4, min(8, math.ceil(duration / 30)))


# ==================== BUILDERS ====================

def build_course(data: Any, goal: str, duration: int) -> Course:
    if not isinstance(data, dict) or not isinstance(data.get("modules"), list):
        raise AIResponseFormatError("AI returned an invalid course: missing modules list")

    try:
        return _build_course(data, goal, duration)
    except PydanticValidationError as e:
        logger.error("AI course has unexpected field types: %s", e)
        raise AIResponseFormatError("AI returned an invalid course: unexpected field types")


def _build_course(data: dict, goal: str, duration: int) -> Course:
    modules = []
    for idx, mod in enumerate(data["modules"]):
        mod = mod if isinstance(mod, dict) else {}
        lessons = [
            Lesson(
                id=f"{idx}-{lesson_idx}",
                title=lesson.get("title") or f"Lesson {lesson_idx + 1}",
                content=lesson.get("content") or "",
                duration=_as_int(lesson.get("duration"), 30) or 30,
            )
            for lesson_idx, lesson in enumerate(_as_list(mod.get("lessons")))
            if isinstance(lesson, dict)
        ]
        modules.append(Module(
            id=str(idx),
            title=mod.get("title") or f"Module {idx + 1}",
            description=mod.get("description") or "",
            lessons=lessons,
        ))

    assignments = []
    for idx, raw in enumerate(_as_list(data.get("assignments"))):
        if not isinstance(raw, dict):
            continue
        questions = []
        for q_idx, q in enumerate(_as_list(raw.get("questions"))):
            if not isinstance(q, dict) or not q.get("question"):
                continue
            options = q.get("options")
            correct = q.get("correctAnswer", q.get("correct_answer"))
            questions.append(Question(
                id=f"q-{idx}-{q_idx}",
                question=str(q["question"]),
                type=q.get("type") if q.get("type") in ("multiple-choice", "text", "code") else "multiple-choice",
                options=[str(o) for o in options] if isinstance(options, list) else None,
                correct_answer=str(correct) if correct is not None else None,
            ))
        assignments.append(Assignment(
            id=f"assignment-{idx}",
            module_id=str(raw.get("moduleId", raw.get("module_id", "0"))),
            title=raw.get("title") or f"Assignment {idx + 1}",
            description=raw.get("description") or "",
            questions=questions,
        ))

    return Course(
        id=generate_id("COURSE"),
        title=data.get("title") or "New course",
        description=data.get("description") or "",
        goal=goal,
        duration=duration,
        modules=modules,
        assignments=assignments,
    )


def build_duel_questions(data: Any) -> List[DuelQuestion]:
    if not isinstance(data, list):
        raise AIResponseFormatError("AI returned an invalid question list")

    questions = []
    for item in data:
        if not isinstance(item, dict):
            continue
        options = item.get("options")
        correct = item.get("correctAnswer", item.get("correct_answer"))
        if not item.get("question") or not isinstance(options, list) or correct is None:
            continue
        try:
            question = DuelQuestion(
                id=f"q-{len(questions)}",
                question=str(item["question"]),
                options=[str(o) for o in options],
                correct_answer=str(correct),
                difficulty=item.get("difficulty") or "medium",
            )
        except PydanticValidationError as e:
            logger.error("AI duel question has unexpected field types: %s", e)
            raise AIResponseFormatError("AI returned an invalid question list: unexpected field types")
        questions.append(question)

    if not questions:
        raise AIResponseFormatError("AI returned no usable questions")
    return questions


def build_boss_turn(data: Any) -> BossTurn:
    if not isinstance(data, dict) or not isinstance(data.get("response"), str):
        raise AIResponseFormatError("AI returned an invalid boss response")
    return BossTurn(
        response=data["response"],
        player_damage=max(0, _as_int(data.get("playerDamage"), 0)),
        boss_damage=max(0, _as_int(data.get("bossDamage"), 0)),
    )


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ==================== SERVICE ====================

class AIService:
    """Async facade over GeminiKeyManager"""

    def __init__(self, manager: GeminiKeyManager):
        self.manager = manager

    async def _run(self, prompt: str, key_names: Sequence[str] = ("primary",)) -> str:
        return await asyncio.to_thread(self.manager.run_gemini, prompt, key_names)

    async def generate_course(self, goal: str, duration: int) -> Course:
        prompt = PROMPTS["course"]["standard"].format(
            goal=goal, duration=duration, module_count=module_count_hint(duration)
        )
        raw = await self._run(prompt)
        course = build_course(extract_json(raw, "object"), goal, duration)
        logger.info("Generated course %s with %s modules", course.id, len(course.modules))
        return course

    async def chat(self, message: str, context: Optional[str] = None) -> str:
        if context:
            prompt = PROMPTS["chat"]["with_context"].format(context=context, message=message)
        else:
            prompt = PROMPTS["chat"]["standard"].format(message=message)
        return await self._run(prompt)

    async def ask_tutor(self, lesson_content: str, question: str) -> str:
        prompt = PROMPTS["tutor"]["standard"].format(
            lesson=lesson_content[:TUTOR_CONTEXT_LIMIT], question=question
        )
        return await self._run(prompt, TUTOR_KEY_ORDER)

    async def generate_duel_questions(
        self, topic: str, count: int = 7, difficulty: str = "medium", language: str = "English"
    ) -> List[DuelQuestion]:
        prompt = PROMPTS["duel"]["standard"].format(
            topic=topic, count=count, difficulty=difficulty, language=language
        )
        raw = await self._run(prompt)
        return build_duel_questions(extract_json(raw, "array"))[:count]

    async def generate_boss_intro(
        self, topic: str, difficulty: str, boss_name: str, language: str = "English"
    ) -> str:
        prompt = PROMPTS["boss_intro"]["standard"].format(
            topic=topic, difficulty=difficulty, boss_name=boss_name, language=language
        )
        return await self._run(prompt)

    async def generate_boss_response(
        self,
        topic: str,
        difficulty: str,
        boss_name: str,
        history: List[BossMessage],
        player_input: str,
        language: str = "English",
    ) -> BossTurn:
        transcript = "\n".join(f"{m.role}: {m.content}" for m in history)
        prompt = PROMPTS["boss_turn"]["standard"].format(
            topic=topic, difficulty=difficulty, boss_name=boss_name,
            history=transcript, player_input=player_input, language=language,
        )
        raw = await self._run(prompt)
        return build_boss_turn(extract_json(raw, "object"))

    def get_stats(self) -> dict:
        return self.manager.get_stats()
