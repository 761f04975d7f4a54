from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Union

from .schemas import ExerciseKind


def _is_int(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


def _as_index(value: Any) -> Optional[int]:
	if _is_int(value):
		return value
	if isinstance(value, str):
		try:
			return int(value.strip())
		except ValueError:
			return None
	return None


def _index_mapping(value: Any) -> Optional[Dict[int, int]]:
	# JSON object keys always arrive as strings, so "0" and 0 name the same left item
	if not isinstance(value, Mapping):
		return None
	out: Dict[int, int] = {}
	for k, v in value.items():
		key = _as_index(k)
		val = _as_index(v)
		if key is None or val is None or key in out:
			return None
		out[key] = val
	return out


def _evaluate_mcq(submitted: Any, correct: Mapping[str, Any]) -> bool:
	expected = correct.get("correctIndex")
	return _is_int(submitted) and _is_int(expected) and submitted == expected


def _evaluate_true_false(submitted: Any, correct: Mapping[str, Any]) -> bool:
	expected = correct.get("correct")
	return isinstance(submitted, bool) and isinstance(expected, bool) and submitted is expected


def _evaluate_match(submitted: Any, correct: Mapping[str, Any]) -> bool:
	given = _index_mapping(submitted)
	expected = _index_mapping(correct.get("pairs"))
	if given is None or expected is None:
		return False
	return given == expected


def _evaluate_anagram(submitted: Any, correct: Mapping[str, Any]) -> bool:
	target = correct.get("target")
	if not isinstance(submitted, str) or not isinstance(target, str):
		return False
	return submitted.strip().lower() == target.strip().lower()


_EVALUATORS = {
	ExerciseKind.MCQ: _evaluate_mcq,
	ExerciseKind.TRUE_FALSE: _evaluate_true_false,
	ExerciseKind.MATCH: _evaluate_match,
	ExerciseKind.ANAGRAM: _evaluate_anagram,
}


def evaluate_answer(kind: Union[ExerciseKind, str], submitted: Any, correct_data: Any) -> bool:
	"""Grade one submission against the stored ``data`` payload of its exercise.

	Unknown kinds and malformed reference data grade as wrong; this never raises.
	"""
	try:
		exercise_kind = ExerciseKind(kind)
	except (TypeError, ValueError):
		return False
	if not isinstance(correct_data, Mapping):
		return False
	return _EVALUATORS[exercise_kind](submitted, correct_data)
