from __future__ import annotations

import base64
import json
import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..elo import DEFAULT_RATING, MAX_DIFFICULTY, EloUpdateResult, update_elo
from ..errors import SuggestionsUnavailable
from ..evaluator import evaluate_answer
from ..schemas import exercise_to_wire
from ..settings import settings
from ..suggestions import SuggestionPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["practice"])


def get_pipeline() -> SuggestionPipeline:
    return SuggestionPipeline()


class SubmitRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    exercise_id: str
    answer: Any
    exercise_type: str
    difficulty_rating: float = Field(ge=0, le=MAX_DIFFICULTY, allow_inf_nan=False)
    correct_answer: Dict[str, Any]
    # Rating storage lives with the caller; it sends the current value and keeps newElo
    current_rating: int = Field(default=DEFAULT_RATING, ge=0)


def _next_cursor() -> str:
    token = json.dumps({"timestamp": int(time.time() * 1000), "seed": uuid.uuid4().hex[:9]})
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


@router.get("/suggestions")
async def suggestions(
    rating: int = Query(default=DEFAULT_RATING, ge=0),
    keywords: List[str] = Query(default=[]),
    limit: Optional[int] = Query(default=None, ge=1),
    native: Optional[str] = None,
    target: Optional[str] = None,
    pipeline: SuggestionPipeline = Depends(get_pipeline),
):
    page_size = min(limit or settings.suggestions_default_limit, settings.suggestions_max_limit)
    try:
        items = await pipeline.generate(keywords, rating, page_size, native, target)
    except SuggestionsUnavailable as e:
        logger.warning("Suggestions generation error: %s", e)
        raise HTTPException(status_code=503, detail="Suggestions unavailable")

    body: Dict[str, Any] = {"items": [exercise_to_wire(item) for item in items]}
    if len(items) == page_size:
        body["nextCursor"] = _next_cursor()
    return body


@router.post("/practice/submit", response_model=EloUpdateResult)
def submit(req: SubmitRequest):
    is_correct = evaluate_answer(req.exercise_type, req.answer, req.correct_answer)
    result = update_elo(req.current_rating, req.difficulty_rating, is_correct)
    logger.info(
        "Graded %s (%s): correct=%s delta=%d",
        req.exercise_id,
        req.exercise_type,
        result.is_correct,
        result.delta_elo,
    )
    return result
