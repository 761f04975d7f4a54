from __future__ import annotations
from enum import Enum
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MIN_ESTIMATED_TIME = 5
MAX_ESTIMATED_TIME = 600
MAX_MCQ_OPTIONS = 8


class ExerciseKind(str, Enum):
	MCQ = "mcq"
	TRUE_FALSE = "true_false"
	MATCH = "match"
	ANAGRAM = "anagram"


# Seconds, used when the generator gives no usable estimate
DEFAULT_ESTIMATED_TIME: Dict[ExerciseKind, int] = {
	ExerciseKind.MCQ: 30,
	ExerciseKind.TRUE_FALSE: 15,
	ExerciseKind.MATCH: 60,
	ExerciseKind.ANAGRAM: 45,
}


class _WireModel(BaseModel):
	# Clients and the generator speak camelCase JSON
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class McqData(_WireModel):
	question: str
	options: List[str] = Field(min_length=1, max_length=MAX_MCQ_OPTIONS)
	correct_index: int = Field(ge=0)

	@model_validator(mode="after")
	def _index_points_at_option(self) -> "McqData":
		if self.correct_index >= len(self.options):
			raise ValueError("correct_index out of range for options")
		return self


class TrueFalseData(_WireModel):
	statement: str
	correct: bool


class MatchData(_WireModel):
	left: List[str]
	right: List[str]
	# left index -> right index
	pairs: Dict[int, int]


class AnagramData(_WireModel):
	letters: List[str]
	target: str


class _ExerciseBase(_WireModel):
	id: str = Field(min_length=1)
	prompt: str = ""
	difficulty_rating: int = Field(ge=0)
	estimated_time: int = Field(ge=MIN_ESTIMATED_TIME, le=MAX_ESTIMATED_TIME)
	keywords: List[str] = Field(default_factory=list)


class McqExercise(_ExerciseBase):
	kind: Literal["mcq"] = "mcq"
	data: McqData


class TrueFalseExercise(_ExerciseBase):
	kind: Literal["true_false"] = "true_false"
	data: TrueFalseData


class MatchExercise(_ExerciseBase):
	kind: Literal["match"] = "match"
	data: MatchData


class AnagramExercise(_ExerciseBase):
	kind: Literal["anagram"] = "anagram"
	data: AnagramData


ExerciseRecord = Annotated[
	Union[McqExercise, TrueFalseExercise, MatchExercise, AnagramExercise],
	Field(discriminator="kind"),
]


def exercise_to_wire(record: _ExerciseBase) -> dict:
	"""JSON-ready camelCase dict, the shape clients receive and later send back for grading."""
	return record.model_dump(mode="json", by_alias=True)
