"""Unit tests for answer grading."""

import pytest

from lingo_practice.evaluator import evaluate_answer
from lingo_practice.schemas import ExerciseKind


class TestMcq:
    def test_matching_index(self):
        assert evaluate_answer("mcq", 2, {"correctIndex": 2}) is True
        assert evaluate_answer("mcq", 1, {"correctIndex": 2}) is False

    def test_enum_kind_accepted(self):
        assert evaluate_answer(ExerciseKind.MCQ, 0, {"correctIndex": 0}) is True

    def test_bool_and_string_answers_never_match(self):
        """True == 1 in Python; a boolean is not an option index."""
        assert evaluate_answer("mcq", True, {"correctIndex": 1}) is False
        assert evaluate_answer("mcq", "2", {"correctIndex": 2}) is False

    def test_missing_reference(self):
        assert evaluate_answer("mcq", 0, {}) is False


class TestTrueFalse:
    def test_boolean_equality(self):
        assert evaluate_answer("true_false", True, {"correct": True}) is True
        assert evaluate_answer("true_false", False, {"correct": True}) is False
        assert evaluate_answer("true_false", False, {"correct": False}) is True

    def test_truthy_non_bool_is_wrong(self):
        assert evaluate_answer("true_false", 1, {"correct": True}) is False
        assert evaluate_answer("true_false", "true", {"correct": True}) is False


class TestMatch:
    def test_exact_pairs(self):
        assert evaluate_answer("match", {0: 1, 1: 0}, {"pairs": {0: 1, 1: 0}}) is True
        assert evaluate_answer("match", {0: 0, 1: 1}, {"pairs": {0: 1, 1: 0}}) is False

    def test_json_string_keys(self):
        assert evaluate_answer("match", {"0": 1, "1": 0}, {"pairs": {"0": 1, "1": 0}}) is True
        assert evaluate_answer("match", {"1": 0, "0": 1}, {"pairs": {0: 1, 1: 0}}) is True

    def test_no_partial_credit(self):
        assert evaluate_answer("match", {0: 1}, {"pairs": {0: 1, 1: 0}}) is False
        assert evaluate_answer("match", {0: 1, 1: 0, 2: 2}, {"pairs": {0: 1, 1: 0}}) is False

    def test_malformed_reference(self):
        assert evaluate_answer("match", {0: 1}, {}) is False
        assert evaluate_answer("match", {0: 1}, {"pairs": [[0, 1]]}) is False
        assert evaluate_answer("match", {"a": 1}, {"pairs": {"a": 1}}) is False

    def test_submission_not_a_mapping(self):
        assert evaluate_answer("match", [1, 0], {"pairs": {0: 1, 1: 0}}) is False


class TestAnagram:
    @pytest.mark.parametrize("answer", ["hello", "HELLO", "  hello  ", "  HELLO  "])
    def test_case_and_whitespace_insensitive(self, answer):
        assert evaluate_answer("anagram", answer, {"target": "hello"}) is True

    def test_wrong_word(self):
        assert evaluate_answer("anagram", "world", {"target": "hello"}) is False

    def test_non_string_inputs(self):
        assert evaluate_answer("anagram", 5, {"target": "5"}) is False
        assert evaluate_answer("anagram", "hello", {}) is False


class TestUnknownKind:
    @pytest.mark.parametrize("kind", ["unknown-kind", "", None, "MCQ", ["mcq"]])
    def test_fails_closed(self, kind):
        assert evaluate_answer(kind, "answer", {}) is False

    def test_reference_not_a_mapping(self):
        assert evaluate_answer("mcq", 0, None) is False
        assert evaluate_answer("anagram", "a", "a") is False
