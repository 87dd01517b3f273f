import asyncio
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import quizgen
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from quizgen.models.generation import GenerationRequest, Strategy, QuestionType


# Common test fixtures
@pytest.fixture
def make_request():
    """Factory for GenerationRequest with test defaults."""
    def _make(count: int = 10, **overrides) -> GenerationRequest:
        fields = {"material_id": "material-1", "count": count}
        fields.update(overrides)
        return GenerationRequest(**fields)
    return _make


def service_question(index: int, qtype: str = "multiple-choice") -> dict:
    """One question as the generation service returns it."""
    return {
        "id": f"svc_{qtype}_{index}",
        "type": qtype,
        "question": f"Question {index}?",
        "options": ["A", "B", "C", "D"] if qtype == "multiple-choice" else [],
        "correctAnswer": 0 if qtype == "multiple-choice" else "answer",
        "explanation": "because",
        "difficulty": 1,
    }


def service_envelope(count: int, qtype: str = "multiple-choice", **data) -> dict:
    """A successful service response carrying `count` questions."""
    payload = {"questions": [service_question(i, qtype) for i in range(count)]}
    payload.update(data)
    return {"success": True, "data": payload}


def run(coro):
    """Drive a coroutine to completion in a fresh event loop."""
    return asyncio.run(coro)


class Slow:
    """Scripted response that only arrives after `seconds`."""

    def __init__(self, seconds: float, envelope: dict = None):
        self.seconds = seconds
        self.envelope = envelope or service_envelope(1)


class FakeGenerationClient:
    """
    Stand-in for GenerationServiceClient driven by a script.

    `responses` maps a Strategy to an envelope dict, an exception to raise,
    a Slow wrapper, a callable (request, batches) -> envelope, or a list of
    those consumed in order.
    """

    def __init__(self, responses=None, health=None):
        self.responses = responses or {}
        self.health = health if health is not None else []
        self.calls = []
        self.health_calls = 0

    @staticmethod
    async def _resolve(response, *args):
        if isinstance(response, Slow):
            await asyncio.sleep(response.seconds)
            return response.envelope
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response

    async def request_generation(self, strategy, request, batches=None):
        self.calls.append((strategy, request, batches))
        response = self.responses.get(strategy)
        if isinstance(response, list):
            response = response.pop(0)
        return await self._resolve(response, request, batches)

    async def check_health(self):
        self.health_calls += 1
        response = self.health.pop(0) if len(self.health) > 1 else self.health[0]
        return await self._resolve(response)


@pytest.fixture
def tiny_deadlines():
    """Deadlines short enough for timeout tests to run in milliseconds."""
    return {Strategy.QUICK: 0.05, Strategy.OPTIMIZED: 0.05, Strategy.BATCH: 0.05}
