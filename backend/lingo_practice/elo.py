from __future__ import annotations
import math
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_RATING = 1000
MAX_DIFFICULTY = 3000
# Half-width of the difficulty band served around a learner's rating
DIFFICULTY_SPREAD = 150
MAX_EXPONENT = 300


class EloUpdateResult(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

	is_correct: bool
	delta_elo: int
	new_elo: int


class DifficultyRange(BaseModel):
	model_config = ConfigDict(frozen=True)

	min: int
	max: int

	def clamp(self, value: float) -> int:
		return max(self.min, min(self.max, math.floor(value)))


def usable_rating(rating: float) -> float:
	"""The rating itself, or DEFAULT_RATING when it is not a finite number."""
	if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not math.isfinite(rating):
		return DEFAULT_RATING
	return rating


def expected_score(subject_rating: float, item_rating: float) -> float:
	exponent = (item_rating - subject_rating) / 400
	if math.isnan(exponent):
		return 0.5
	# 10 ** 300 is still a finite float; beyond that the score is 0 or 1 anyway
	exponent = max(-MAX_EXPONENT, min(MAX_EXPONENT, exponent))
	return 1 / (1 + math.pow(10, exponent))


def k_factor(rating: float) -> int:
	if rating < 1000:
		return 40
	if rating > 1600:
		return 24
	return 32


def round_half_away_from_zero(value: float) -> int:
	# round() would give banker's rounding: round(2.5) == 2
	return int(math.copysign(math.floor(abs(value) + 0.5), value))


def update_elo(subject_rating: float, item_rating: float, is_correct: bool) -> EloUpdateResult:
	subject_rating = usable_rating(subject_rating)
	if not math.isfinite(item_rating):
		# Scored as an even match
		item_rating = subject_rating
	expected = expected_score(subject_rating, item_rating)
	actual = 1 if is_correct else 0
	delta = round_half_away_from_zero(k_factor(subject_rating) * (actual - expected))
	new_rating = max(0, math.floor(subject_rating + delta))
	return EloUpdateResult(is_correct=bool(is_correct), delta_elo=delta, new_elo=new_rating)


def difficulty_range(rating: float) -> DifficultyRange:
	rating = usable_rating(rating)
	# Both ends stay inside [0, MAX_DIFFICULTY] so min <= max holds for any rating
	low = max(0, min(MAX_DIFFICULTY, rating - DIFFICULTY_SPREAD))
	high = min(MAX_DIFFICULTY, max(0, rating + DIFFICULTY_SPREAD))
	return DifficultyRange(min=math.ceil(low), max=math.floor(high))
