import json
import random
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from colearn.ai.services import AIService
from colearn.errors import AIServiceError
from colearn.main import create_app
from colearn.storage import MemoryDocumentStore


class FakeGemini:
    """Stands in for GeminiKeyManager; answers from a queue of scripted texts"""

    configured = True

    def __init__(self):
        self.responses: List = []
        self.prompts: List = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    def run_gemini(self, prompt, key_names=("primary",)):
        self.prompts.append((prompt, tuple(key_names)))
        if not self.responses:
            raise AIServiceError("AI request failed: no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get_stats(self):
        return {"primary": {"requests_today": len(self.prompts)}}


class ScriptedRandom(random.Random):
    """random() returns the scripted values in order, then 0.5"""

    def __init__(self, values=()):
        super().__init__(0)
        self.values = list(values)

    def script(self, *values) -> None:
        self.values.extend(values)

    def random(self):
        return self.values.pop(0) if self.values else 0.5


def course_payload(module_sizes=(2, 2), questions=2) -> str:
    """Gemini-style course answer wrapped in prose and a code fence"""
    modules = [
        {
            "title": f"Module {m}",
            "description": f"About module {m}",
            "lessons": [
                {"title": f"Lesson {m}.{l}", "content": f"Content {m}.{l}", "duration": 40}
                for l in range(size)
            ],
        }
        for m, size in enumerate(module_sizes)
    ]
    assignments = [
        {
            "moduleId": str(m),
            "title": f"Check {m}",
            "questions": [
                {
                    "question": f"Q{m}.{n}",
                    "type": "multiple-choice",
                    "options": ["right", "wrong", "other", "none"],
                    "correctAnswer": "right",
                }
                for n in range(questions)
            ],
        }
        for m in range(len(module_sizes))
    ]
    body = json.dumps({"title": "Python Basics", "description": "Learn {braces}", "modules": modules,
                       "assignments": assignments})
    return f"Here is your course:\n```json\n{body}\n```"


def duel_payload(count=1) -> str:
    questions = [
        {"question": f"{n} + {n}?", "options": [str(2 * n), "0", "1", "3"], "correctAnswer": str(2 * n)}
        for n in range(1, count + 1)
    ]
    return json.dumps(questions)


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def ai(gemini) -> AIService:
    return AIService(gemini)


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def client(store, ai, rng) -> Iterator[TestClient]:
    app = create_app(store=store, ai=ai, rng=rng)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user and return (user, auth headers)"""

    def _register(username="alice", email=None, name=None, password="secret123"):
        response = client.post("/auth/register", json={
            "email": email or f"{username}@example.com",
            "password": password,
            "name": name or username.title(),
            "username": username,
        })
        assert response.status_code == 201, response.text
        data = response.json()
        return data["user"], {"Authorization": f"Bearer {data['access_token']}"}

    return _register


@pytest.fixture
def make_course_payload():
    return course_payload


@pytest.fixture
def make_duel_payload():
    return duel_payload
