"""Tests for the format transformer and answer arithmetic."""

from __future__ import annotations

import random

import pytest

from learnhub.core.types import GeneratedQuestion, QuestionFormat
from learnhub.formatting.distractors import OPTION_COUNT, build_options, synthesize_distractors
from learnhub.formatting.numbers import (
    answers_match,
    calculate_answer,
    extract_expression,
    format_number,
    parse_number,
)
from learnhub.formatting.transformer import BLANK, FALSE, TRUE, apply_format, claimed_value, fill_blank


def make_question(
    stem: str = "What is 5 + 2?",
    answer: str = "7",
    options: list[str] | None = None,
    statement: str | None = None,
) -> GeneratedQuestion:
    return GeneratedQuestion(
        id="q_test",
        stem=stem,
        question=stem,
        canonical_answer=answer,
        answer=answer,
        options=options,
        statement=statement,
        question_type="ADDITION",
    )


# =============================================================================
# Multiple choice
# =============================================================================


class TestMultipleChoice:
    """Tests for MULTIPLE_CHOICE rendering."""

    def test_two_existing_options_completed_to_four(self) -> None:
        """Two existing options become four, with the answer exactly once."""
        question = make_question(answer="7", options=["7", "9"])

        result = apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(3))

        assert result.options is not None
        assert len(result.options) == OPTION_COUNT
        assert result.options.count("7") == 1
        assert "9" in result.options
        assert result.answer == "7"
        assert result.format is QuestionFormat.MULTIPLE_CHOICE

    def test_options_are_shuffled(self) -> None:
        """Option order depends on the random source, not on synthesis order."""
        question = make_question(answer="7", options=["7", "9"])
        orders = {
            tuple(apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(seed)).options or [])
            for seed in range(20)
        }

        assert len(orders) > 1

    def test_no_options_synthesized(self) -> None:
        """Questions without options get numeric distractors."""
        result = apply_format(make_question(answer="12"), QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(0))

        assert result.options is not None
        assert sorted(result.options, key=float) == ["10", "12", "14", "16"]

    def test_text_answer(self) -> None:
        """Textual answers get distractors from the pool."""
        question = make_question(stem="Which shape has three sides?", answer="Triangle", options=["Square"])

        result = apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(0))

        assert result.options is not None
        assert len(result.options) == OPTION_COUNT
        assert result.options.count("Triangle") == 1
        assert "Square" in result.options

    def test_too_many_options_trimmed(self) -> None:
        """Extra options are dropped; the answer always stays."""
        question = make_question(answer="7", options=["1", "2", "3", "4", "5", "7"])

        result = apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(0))

        assert result.options is not None
        assert len(result.options) == OPTION_COUNT
        assert "7" in result.options

    def test_equivalent_answer_spelling_not_duplicated(self) -> None:
        """An option equal to the answer in another spelling is not kept as a distractor."""
        question = make_question(answer="7", options=["7.0", "9"])

        result = apply_format(question, QuestionFormat.MULTIPLE_CHOICE, rng=random.Random(0))

        assert result.options is not None
        assert sum(1 for o in result.options if answers_match(o, "7")) == 1


# =============================================================================
# Other formats
# =============================================================================


class TestShortAnswer:
    """Tests for SHORT_ANSWER rendering."""

    def test_options_removed(self) -> None:
        """Short answer strips options and keeps the canonical answer."""
        question = make_question(options=["7", "9", "5", "11"])

        result = apply_format(question, QuestionFormat.SHORT_ANSWER)

        assert result.options is None
        assert result.answer == "7"
        assert result.question == question.stem


class TestTrueFalse:
    """Tests for TRUE_FALSE rendering."""

    def test_supplied_true_statement(self) -> None:
        """A correct supplied statement is judged True."""
        question = make_question(statement="5 + 2 = 7")

        result = apply_format(question, QuestionFormat.TRUE_FALSE)

        assert result.answer == TRUE
        assert result.options == [TRUE, FALSE]
        assert result.question == "True or False: What is 5 + 2? 5 + 2 = 7"

    def test_supplied_false_statement(self) -> None:
        """A wrong supplied statement is judged False."""
        result = apply_format(make_question(statement="The answer is 9."), QuestionFormat.TRUE_FALSE)

        assert result.answer == FALSE

    def test_generated_statement_matches_truth(self) -> None:
        """Generated claims are judged against the canonical answer."""
        for seed in range(10):
            result = apply_format(make_question(), QuestionFormat.TRUE_FALSE, rng=random.Random(seed))

            assert result.statement is not None
            claimed = claimed_value(result.statement)
            assert result.answer == (TRUE if answers_match(claimed, "7") else FALSE)
            assert result.canonical_answer == "7"


class TestFillInBlank:
    """Tests for FILL_IN_BLANK rendering and fill_blank."""

    def test_apply_removes_options(self) -> None:
        """Fill in the blank removes options and inserts the marker."""
        result = apply_format(make_question(options=["7", "9"]), QuestionFormat.FILL_IN_BLANK)

        assert result.options is None
        assert BLANK in result.question
        assert result.answer == "7"

    def test_expression_rewritten(self) -> None:
        """A question with arithmetic becomes an equation with a blank."""
        assert fill_blank("What is 5 + 3?", "8") == "5 + 3 = _____"

    def test_answer_token_blanked(self) -> None:
        """The answer token is replaced in place."""
        assert fill_blank("The capital of France is Paris.", "Paris") == "The capital of France is _____."

    def test_operand_equal_to_answer_not_blanked(self) -> None:
        """An operand that equals the answer is not the answer's position."""
        assert fill_blank("What is 3 × 1?", "3") == "3 × 1 = _____"

    def test_existing_blank_normalized(self) -> None:
        """Existing underscore runs become the standard marker."""
        assert fill_blank("4 + __ = 10", "6") == "4 + _____ = 10"

    def test_worded_expression_rendered_with_symbols(self) -> None:
        """Worded arithmetic is rewritten with operator symbols."""
        assert fill_blank("Find the product of 6 and 4.", "24") == "6 × 4 = _____"

    def test_fallback_appends_marker(self) -> None:
        """Without a position the marker is appended."""
        assert fill_blank("Name a prime number.", "2") == "Name a prime number. Answer: _____"


# =============================================================================
# Idempotence
# =============================================================================


class TestIdempotence:
    """Reapplying a format gives an equivalent question."""

    @pytest.mark.parametrize("question_format", list(QuestionFormat))
    @pytest.mark.parametrize(
        ("stem", "answer", "options"),
        [
            ("What is 5 + 2?", "7", ["7", "9"]),
            ("Mia has 12 shells and finds 6 more. How many shells now?", "18", None),
            ("Which shape has three sides?", "Triangle", ["Square", "Triangle", "Circle"]),
            ("What is 0.5 + 0.25?", "0.75", None),
        ],
    )
    def test_reapply_same_format(
        self,
        question_format: QuestionFormat,
        stem: str,
        answer: str,
        options: list[str] | None,
    ) -> None:
        """Applying a format twice matches applying it once, up to option order."""
        once = apply_format(make_question(stem, answer, options), question_format, rng=random.Random(1))
        twice = apply_format(once, question_format, rng=random.Random(2))

        assert twice.question == once.question
        assert twice.answer == once.answer
        assert twice.statement == once.statement
        assert twice.format == once.format
        assert sorted(twice.options or []) == sorted(once.options or [])
        assert twice.stem == stem
        assert twice.canonical_answer == answer


# =============================================================================
# Numbers and distractors
# =============================================================================


class TestNumbers:
    """Tests for answer arithmetic helpers."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("42", 42.0), ("$1,250", 1250.0), ("3/4", 0.75), ("8.", 8.0), (" 2.5 ", 2.5)],
    )
    def test_parse_number(self, text: str, expected: float) -> None:
        """Numbers are read from common answer spellings."""
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["seven", "", "1/0", None, True])
    def test_parse_number_rejects(self, text: object) -> None:
        """Non-numbers give None."""
        assert parse_number(text) is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(8.0, "8"), (2.5, "2.5"), (1 / 3, "0.3333"), (100, "100")],
    )
    def test_format_number(self, value: float, expected: str) -> None:
        """Numbers are written without trailing zeros."""
        assert format_number(value) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("What is 12 + 7?", 19.0),
            ("What is 9 − 4?", 5.0),
            ("What is 6 × 3?", 18.0),
            ("What is 20 ÷ 4?", 5.0),
            ("What is the sum of 4 and 5?", 9.0),
            ("What is the difference between 10 and 3?", 7.0),
            ("What is the quotient of 12 and 4?", 3.0),
        ],
    )
    def test_calculate_answer(self, text: str, expected: float) -> None:
        """Symbolic and worded arithmetic are evaluated."""
        assert calculate_answer(text) == expected

    def test_division_by_zero(self) -> None:
        """Division by zero gives None instead of raising."""
        assert calculate_answer("What is 5 ÷ 0?") is None

    def test_no_expression(self) -> None:
        """Text without arithmetic has no expression."""
        assert extract_expression("Name a shape with four sides.") is None

    def test_answers_match(self) -> None:
        """Answers compare numerically, else as normalized text."""
        assert answers_match("8", "8.0")
        assert answers_match("Blue", " blue. ")
        assert not answers_match("8", "9")
        assert not answers_match(None, "8")


class TestDistractors:
    """Tests for distractor synthesis."""

    def test_integer_distractors(self) -> None:
        """Integer answers get close integer neighbours."""
        assert synthesize_distractors("7", 3) == ["5", "9", "11"]

    def test_decimal_distractors(self) -> None:
        """Decimal answers get neighbours at the same precision."""
        assert synthesize_distractors("0.5", 2) == ["0.3", "0.7"]

    def test_no_negative_distractors_for_small_answers(self) -> None:
        """Non-negative answers never get negative distractors."""
        result = synthesize_distractors("1", 3)

        assert all(float(d) >= 0 for d in result)
        assert "1" not in result

    def test_excluded_values_skipped(self) -> None:
        """Excluded values are never returned."""
        assert "5" not in synthesize_distractors("7", 3, exclude=["5"])

    def test_build_options_answer_last(self) -> None:
        """Options keep existing distractors first and the answer last."""
        assert build_options("7", ["7", "9"]) == ["9", "5", "11", "7"]

    def test_zero_count(self) -> None:
        """Asking for no distractors gives none."""
        assert synthesize_distractors("7", 0) == []

    def test_high_precision_answer(self) -> None:
        """Long decimals get neighbours at four places, a thousandth apart."""
        assert synthesize_distractors("0.333333333333333", 3) == ["0.3313", "0.3353", "0.3373"]

    def test_very_large_answer(self) -> None:
        """Large answers get neighbours scaled to their magnitude."""
        answer = "1000000000000000000"

        result = synthesize_distractors(answer, 3)

        assert len(set(result)) == 3
        assert not any(answers_match(d, answer) for d in result)
        assert all(float(d) > 0 for d in result)

    def test_numeric_candidates_bounded(self) -> None:
        """When every nearby number is taken, the text pool is used."""
        result = synthesize_distractors("7", 3, exclude=[str(n) for n in range(200)])

        assert result == ["None of these", "Not enough information", "All of these"]

    @pytest.mark.parametrize("answer", ["0.333333333333333", "1000000000000000000", "123456789.123456789"])
    @pytest.mark.parametrize("question_format", [QuestionFormat.MULTIPLE_CHOICE, QuestionFormat.TRUE_FALSE])
    def test_extreme_answers_format(self, answer: str, question_format: QuestionFormat) -> None:
        """Extreme numeric answers render without stalling."""
        for seed in range(5):
            result = apply_format(
                make_question(stem="What is 1 / 3?", answer=answer), question_format, rng=random.Random(seed)
            )

            if question_format is QuestionFormat.MULTIPLE_CHOICE:
                assert result.options is not None
                assert len(result.options) == OPTION_COUNT
                assert sum(answers_match(o, answer) for o in result.options) == 1
            else:
                assert result.answer in (TRUE, FALSE)
