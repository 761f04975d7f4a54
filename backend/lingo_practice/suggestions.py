from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .elo import usable_rating
from .errors import SuggestionsUnavailable
from .generator import ExerciseGenerator, GeminiExerciseGenerator, GeneratorRequest
from .normalizer import normalize_exercise
from .schemas import ExerciseRecord
from .settings import settings

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 4


def dedupe_exercises(records: Iterable[ExerciseRecord]) -> List[ExerciseRecord]:
    """Drop later records that repeat an earlier id or (kind, prompt); order is kept."""
    seen_ids = set()
    seen_keys = set()
    out: List[ExerciseRecord] = []
    for record in records:
        key = (record.kind, record.prompt)
        if record.id in seen_ids or key in seen_keys:
            continue
        seen_ids.add(record.id)
        seen_keys.add(key)
        out.append(record)
    return out


class SuggestionPipeline:
    """Fetch one batch of raw candidates and turn it into at most ``limit`` valid exercises.

    Holds no per-call state, so one instance can serve concurrent requests.
    """

    def __init__(self, generator: Optional[ExerciseGenerator] = None) -> None:
        self.generator: ExerciseGenerator = generator or GeminiExerciseGenerator()

    async def generate(
        self,
        keywords: Optional[Sequence[str]],
        rating: float,
        limit: int = DEFAULT_LIMIT,
        native_locale: Optional[str] = None,
        target_locale: Optional[str] = None,
    ) -> List[ExerciseRecord]:
        if not self.generator.is_configured():
            raise SuggestionsUnavailable("Exercise generator is not configured")
        if limit < 1:
            return []
        if isinstance(keywords, str):
            keywords = [keywords]
        rating = usable_rating(rating)

        request = GeneratorRequest(
            limit=limit,
            rating=rating,
            keywords=[str(k) for k in keywords or []],
            native_locale=native_locale or settings.default_native_locale,
            target_locale=target_locale or settings.default_target_locale,
        )
        try:
            candidates = await self.generator.generate_candidates(request)
        except SuggestionsUnavailable:
            logger.exception("Exercise generator unavailable")
            raise
        except Exception as e:
            logger.exception("Exercise generator error")
            raise SuggestionsUnavailable("Exercise generator error") from e
        if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence):
            logger.error("Exercise generator returned %s instead of a list", type(candidates).__name__)
            raise SuggestionsUnavailable("Exercise generator returned unusable output")

        accepted: List[ExerciseRecord] = []
        for candidate in candidates:
            record = normalize_exercise(candidate, rating)
            if record is not None:
                accepted.append(record)
            if len(accepted) >= limit:
                break

        items = dedupe_exercises(accepted)[:limit]
        if len(items) < limit:
            logger.info("Generator produced %d usable exercises of %d requested", len(items), limit)
        return items
