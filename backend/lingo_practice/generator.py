from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, field_validator

from .elo import difficulty_range
from .errors import SuggestionsUnavailable
from .gemini_client import GeminiClient
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10

DEFAULT_KEYWORDS: List[str] = [
    "family",
    "work",
    "food",
    "travel",
    "health",
    "shopping",
    "school",
    "weather",
    "transport",
    "daily routines",
]


class GeneratorRequest(BaseModel):
    limit: int = Field(ge=1)
    rating: float = Field(allow_inf_nan=False)
    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    native_locale: str
    target_locale: str

    @field_validator("keywords")
    @classmethod
    def _cap_keywords(cls, value: List[str]) -> List[str]:
        cleaned = [k for k in value if k and k.strip()]
        return (cleaned or list(DEFAULT_KEYWORDS))[:MAX_KEYWORDS]


class ExerciseGenerator(Protocol):
    """Source of raw exercise candidates. Output is untrusted and gets normalized downstream."""

    def is_configured(self) -> bool: ...

    async def generate_candidates(self, request: GeneratorRequest) -> Sequence[Any]: ...


SYSTEM_PROMPT = (
    "You are a language practice item generator. Output STRICT JSON only, no markdown, no commentary. "
    "Language for prompts and content is {target_locale}."
)

DEVELOPER_PROMPT = """
Return exactly {limit} items as a JSON array. Types must be one of mcq, true_false, match, anagram; vary them.
difficultyRating must be in [{min_difficulty}, {max_difficulty}].
Schema per item:
{{ "id": string, "type": string, "prompt": string, "data": object, "difficultyRating": number, "estimatedTime": number, "keywords": [string] }}
- mcq.data: {{ "question": string, "options": [string], "correctIndex": integer }}
- true_false.data: {{ "statement": string, "correct": boolean }}
- match.data: {{ "left": [string], "right": [string], "pairs": [{{ "i": integer, "v": integer }}] }} mapping left index i to right index v
- anagram.data: {{ "letters": [string], "target": string }}
""".strip()


def build_prompt(request: GeneratorRequest) -> str:
    band = difficulty_range(request.rating)
    developer = DEVELOPER_PROMPT.format(
        limit=request.limit,
        min_difficulty=band.min,
        max_difficulty=band.max,
    )
    user = {
        "nativeLanguage": request.native_locale,
        "targetLanguage": request.target_locale,
        "elo": request.rating,
        "limit": request.limit,
        "keywords": request.keywords,
        "diversity": True,
    }
    return f"Developer: {developer}\nUser: {json.dumps(user, ensure_ascii=False)}"


def extract_json_array(text: str) -> List[Any]:
    try:
        data = json.loads(text)
    except Exception:
        data = None
        # Try to locate the first JSON array in the text
        match = re.search(r"\[[\s\S]*\]", text)
        if match:
            try:
                data = json.loads(match.group(0))
            except Exception:
                data = None
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        data = data["items"]
    if not isinstance(data, list):
        raise ValueError("Failed to parse a JSON array from Gemini output")
    return data


class GeminiExerciseGenerator:
    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        client_factory: Optional[Callable[[], GeminiClient]] = None,
    ) -> None:
        self._settings = config or default_settings
        self._client_factory = client_factory or (lambda: GeminiClient(config=self._settings))

    def is_configured(self) -> bool:
        return bool(self._settings.gemini_api_key)

    async def generate_candidates(self, request: GeneratorRequest) -> List[Any]:
        if not self.is_configured():
            raise SuggestionsUnavailable("Gemini API key not set")
        client: Optional[GeminiClient] = None
        try:
            client = self._client_factory()
            raw = await client.generate(
                build_prompt(request),
                system_instruction=SYSTEM_PROMPT.format(target_locale=request.target_locale),
                json_output=True,
            )
            return extract_json_array(raw)
        except SuggestionsUnavailable:
            raise
        except Exception as e:
            raise SuggestionsUnavailable(f"Gemini generation failed: {e}") from e
        finally:
            if client is not None:
                await client.aclose()
