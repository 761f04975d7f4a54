from __future__ import annotations
import logging
import math
import random
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .elo import difficulty_range, usable_rating
from .schemas import (
	DEFAULT_ESTIMATED_TIME,
	MAX_ESTIMATED_TIME,
	MAX_MCQ_OPTIONS,
	MIN_ESTIMATED_TIME,
	AnagramExercise,
	ExerciseKind,
	ExerciseRecord,
	MatchExercise,
	McqExercise,
	TrueFalseExercise,
)

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_exercise_id() -> str:
	suffix = "".join(random.choice(_BASE36) for _ in range(9))
	return f"exercise_{int(time.time() * 1000)}_{suffix}"


def _is_number(value: Any) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _as_pair_index(value: Any) -> Optional[int]:
	if isinstance(value, bool):
		return None
	if isinstance(value, int):
		index = value
	elif isinstance(value, float) and value.is_integer():
		index = int(value)
	elif isinstance(value, str):
		try:
			index = int(value.strip())
		except ValueError:
			return None
	else:
		return None
	return index if index >= 0 else None


def _string_list(value: Any) -> Optional[List[str]]:
	if not isinstance(value, (list, tuple)):
		return None
	return [str(item) for item in value]


def _reject(raw: Mapping[str, Any], reason: str) -> None:
	logger.debug("Dropping %s candidate %r: %s", raw.get("kind", raw.get("type")), raw.get("id"), reason)
	return None


def _mcq_data(data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
	question = data.get("question")
	options = _string_list(data.get("options"))
	if not isinstance(question, str) or not options:
		return None
	options = options[:MAX_MCQ_OPTIONS]
	raw_index = data.get("correctIndex")
	answer = data.get("answer")
	if _is_number(raw_index):
		correct_index = max(0, min(len(options) - 1, math.floor(raw_index)))
	elif isinstance(answer, str) and answer in options:
		correct_index = options.index(answer)
	else:
		correct_index = 0
	return {"question": question, "options": options, "correct_index": correct_index}


def _true_false_data(data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
	statement = data.get("statement")
	if not isinstance(statement, str):
		return None
	if isinstance(data.get("correct"), bool):
		correct = data["correct"]
	elif isinstance(data.get("answer"), bool):
		correct = data["answer"]
	else:
		return None
	return {"statement": statement, "correct": correct}


def _match_pairs(source: Any, left: List[str], right: List[str]) -> Dict[int, int]:
	pairs: Dict[int, int] = {}
	if isinstance(source, (list, tuple)):
		# [{"i": 0, "v": 2}, ...]
		for entry in source:
			if not isinstance(entry, Mapping):
				continue
			i = _as_pair_index(entry.get("i"))
			v = _as_pair_index(entry.get("v"))
			if i is not None and v is not None:
				pairs[i] = v
	elif isinstance(source, Mapping):
		# {"0": 2, ...}
		for key, value in source.items():
			i = _as_pair_index(key)
			v = _as_pair_index(value)
			if i is not None and v is not None:
				pairs[i] = v
	else:
		# TODO: drop the identity fallback once generator output always carries pairs
		for i in range(min(len(left), len(right))):
			pairs[i] = i
	return pairs


def _match_data(data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
	left = _string_list(data.get("left"))
	right = _string_list(data.get("right"))
	if left is None or right is None:
		return None
	return {"left": left, "right": right, "pairs": _match_pairs(data.get("pairs"), left, right)}


def _anagram_data(data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
	letters = data.get("letters")
	target = data.get("target")
	scrambled = data.get("scrambled")
	answer = data.get("answer")
	has_letters = isinstance(letters, (list, tuple)) and isinstance(target, str)
	has_scrambled = isinstance(scrambled, str) and isinstance(answer, str)
	if not (has_letters or has_scrambled):
		return None
	return {
		"letters": _string_list(letters) if isinstance(letters, (list, tuple)) else list(scrambled),
		"target": target if isinstance(target, str) else answer,
	}


_PAYLOAD_BUILDERS: Dict[ExerciseKind, Callable[[Mapping[str, Any]], Optional[Dict[str, Any]]]] = {
	ExerciseKind.MCQ: _mcq_data,
	ExerciseKind.TRUE_FALSE: _true_false_data,
	ExerciseKind.MATCH: _match_data,
	ExerciseKind.ANAGRAM: _anagram_data,
}

_RECORD_TYPES = {
	ExerciseKind.MCQ: McqExercise,
	ExerciseKind.TRUE_FALSE: TrueFalseExercise,
	ExerciseKind.MATCH: MatchExercise,
	ExerciseKind.ANAGRAM: AnagramExercise,
}


def normalize_exercise(raw: Any, rating: float) -> Optional[ExerciseRecord]:
	"""Turn one loosely-typed generator candidate into a validated exercise.

	Returns None when the candidate cannot be salvaged. Difficulty is clamped into
	the band around ``rating`` and estimated time into [5, 600] seconds. Feeding a
	record's ``model_dump(by_alias=True)`` back in yields an equal record.
	"""
	if not isinstance(raw, Mapping):
		logger.debug("Dropping non-object candidate of type %s", type(raw).__name__)
		return None
	try:
		kind = ExerciseKind(raw.get("kind") or raw.get("type"))
	except (TypeError, ValueError):
		return _reject(raw, "unknown kind")

	raw_id = raw.get("id")
	exercise_id = raw_id if isinstance(raw_id, str) and raw_id else generate_exercise_id()

	raw_prompt = raw.get("prompt")
	if isinstance(raw_prompt, str):
		prompt = raw_prompt
	elif _is_number(raw_prompt):
		prompt = str(raw_prompt)
	else:
		prompt = ""

	raw_difficulty = raw.get("difficultyRating")
	rating = usable_rating(rating)
	band = difficulty_range(rating)
	difficulty = band.clamp(raw_difficulty if _is_number(raw_difficulty) else rating)

	raw_time = raw.get("estimatedTime")
	if _is_number(raw_time):
		estimated_time = max(MIN_ESTIMATED_TIME, min(MAX_ESTIMATED_TIME, math.floor(raw_time)))
	else:
		estimated_time = DEFAULT_ESTIMATED_TIME[kind]

	keywords = _string_list(raw.get("keywords")) or []

	data = raw.get("data")
	if not isinstance(data, Mapping):
		return _reject(raw, "missing data payload")
	payload = _PAYLOAD_BUILDERS[kind](data)
	if payload is None:
		return _reject(raw, f"malformed {kind.value} payload")

	try:
		return _RECORD_TYPES[kind](
			id=exercise_id,
			prompt=prompt,
			difficulty_rating=difficulty,
			estimated_time=estimated_time,
			keywords=keywords,
			data=payload,
		)
	except ValidationError as err:
		return _reject(raw, str(err))
