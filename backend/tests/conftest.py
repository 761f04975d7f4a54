"""Shared pytest fixtures for the lingo-practice test suite."""

from typing import Any, List, Optional

import pytest

from lingo_practice.settings import Settings


class FakeGenerator:
    """In-memory stand-in for the Gemini-backed generator."""

    def __init__(
        self,
        candidates: Any = None,
        *,
        configured: bool = True,
        error: Optional[Exception] = None,
    ) -> None:
        self.candidates = [] if candidates is None else candidates
        self.configured = configured
        self.error = error
        self.requests: List[Any] = []

    def is_configured(self) -> bool:
        return self.configured

    async def generate_candidates(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.candidates


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer credentials out of the tests."""
    for name in (
        "GOOGLE_GENERATIVE_AI_API_KEY",
        "GOOGLE_API_KEY",
        "GEMINI_API_KEY",
        "OPENROUTER_API_KEY",
        "DEFAULT_NATIVE_LOCALE",
        "DEFAULT_TARGET_LOCALE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def configured_settings() -> Settings:
    """Settings with a fake key and no fallback, isolated from the real environment."""
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        gemini_provider="ai_studio",
        openrouter_api_key=None,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    return Settings(_env_file=None, gemini_api_key=None, openrouter_api_key=None)


@pytest.fixture
def raw_mcq() -> dict:
    return {
        "id": "mcq-1",
        "type": "mcq",
        "prompt": "Choose the correct word",
        "difficultyRating": 1020,
        "estimatedTime": 25,
        "keywords": ["food"],
        "data": {
            "question": "I ___ breakfast at 7.",
            "options": ["eat", "eats", "eating", "ate"],
            "correctIndex": 0,
        },
    }


@pytest.fixture
def raw_true_false() -> dict:
    return {
        "id": "tf-1",
        "type": "true_false",
        "prompt": "Is this sentence correct?",
        "difficultyRating": 980,
        "estimatedTime": 10,
        "keywords": ["family"],
        "data": {"statement": "She have two brothers.", "correct": False},
    }


@pytest.fixture
def raw_match() -> dict:
    return {
        "id": "match-1",
        "type": "match",
        "prompt": "Match the words to their meanings",
        "difficultyRating": 1100,
        "estimatedTime": 70,
        "keywords": ["travel"],
        "data": {
            "left": ["ticket", "luggage"],
            "right": ["bags", "pass"],
            "pairs": [{"i": 0, "v": 1}, {"i": 1, "v": 0}],
        },
    }


@pytest.fixture
def raw_anagram() -> dict:
    return {
        "id": "anagram-1",
        "type": "anagram",
        "prompt": "Unscramble the word",
        "difficultyRating": 900,
        "estimatedTime": 40,
        "keywords": ["weather"],
        "data": {"letters": ["n", "i", "a", "r"], "target": "rain"},
    }


@pytest.fixture
def raw_candidates(raw_mcq, raw_true_false, raw_match, raw_anagram) -> List[dict]:
    """Six valid, mutually distinct candidates covering every kind."""
    extra_mcq = dict(raw_mcq, id="mcq-2", prompt="Pick the past tense", difficultyRating=5000)
    extra_tf = dict(raw_true_false, id="tf-2", prompt="True or false?", estimatedTime=9999)
    return [raw_mcq, raw_true_false, raw_match, raw_anagram, extra_mcq, extra_tf]
