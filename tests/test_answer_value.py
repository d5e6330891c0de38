"""Tests for typed answer values and the answer model's slot handling."""
from datetime import date, datetime
from decimal import Decimal

import pytest

from alumni_tracer.models.answer_value import (
    BooleanValue,
    ChoiceValue,
    DateValue,
    EmptyValue,
    FileValue,
    NumberValue,
    PAYLOAD_COLUMNS,
    TextValue,
    coerce_answer_value,
    is_blank,
    payload_columns,
)
from alumni_tracer.models.survey_answer import SurveyAnswer
from alumni_tracer.models.survey_question import SurveyQuestion


def make_question(question_type: str) -> SurveyQuestion:
    return SurveyQuestion(question_text="Q", question_type=question_type)


class TestIsBlank:

    @pytest.mark.parametrize("raw", [None, "", "   ", [], {}, ()])
    def test_blank_inputs(self, raw):
        assert is_blank(raw)

    @pytest.mark.parametrize("raw", [0, False, "0", ["a"], {"row": "col"}, Decimal("0")])
    def test_falsy_values_are_real_answers(self, raw):
        assert not is_blank(raw)


class TestCoerceAnswerValue:

    def test_text_types_store_strings(self):
        assert coerce_answer_value("Hello", "text") == TextValue("Hello")
        assert coerce_answer_value(42, "textarea") == TextValue("42")
        assert coerce_answer_value("B", "single_choice") == TextValue("B")

    def test_unknown_type_falls_back_to_text(self):
        assert coerce_answer_value("x", "signature") == TextValue("x")

    def test_number(self):
        assert coerce_answer_value("12.5", "number") == NumberValue(Decimal("12.5"))
        assert coerce_answer_value(3, "number") == NumberValue(Decimal("3"))

    @pytest.mark.parametrize("raw", ["abc", "", "NaN", "inf", True, [1]])
    def test_number_rejects_non_numeric(self, raw):
        assert isinstance(coerce_answer_value(raw, "number"), EmptyValue)

    @pytest.mark.parametrize("question_type", ["number", "rating"])
    @pytest.mark.parametrize("raw", ["1e1000000", "1e400", "-1e11", Decimal("1E+1000000"), "99999999999.99996"])
    def test_numbers_too_large_for_the_column_store_nothing(self, question_type, raw):
        assert isinstance(coerce_answer_value(raw, question_type), EmptyValue)

    def test_number_is_rounded_to_column_scale(self):
        assert coerce_answer_value("99999999999.9999", "number") == NumberValue(Decimal("99999999999.9999"))
        assert coerce_answer_value("1.23456", "number") == NumberValue(Decimal("1.2346"))
        assert coerce_answer_value("1e-1000000", "number") == NumberValue(Decimal("0"))
        assert coerce_answer_value("0E+1000000", "rating") == NumberValue(Decimal(0), integral=True)

    def test_rating_truncates_to_integer(self):
        value = coerce_answer_value("4.7", "rating")
        assert value == NumberValue(Decimal(4), integral=True)
        assert value.formatted() == 4

    def test_date_accepts_iso_strings_and_objects(self):
        assert coerce_answer_value("2024-03-15", "date") == DateValue(date(2024, 3, 15))
        assert coerce_answer_value("2024-03-15T10:30:00", "date") == DateValue(date(2024, 3, 15))
        assert coerce_answer_value(datetime(2024, 3, 15, 9), "date") == DateValue(date(2024, 3, 15))

    def test_date_rejects_garbage(self):
        assert isinstance(coerce_answer_value("31/02/2024", "date"), EmptyValue)

    def test_choice_lists_keep_order(self):
        assert coerce_answer_value(["b", "a"], "multiple_choice") == ChoiceValue(["b", "a"])

    def test_scalar_choice_is_wrapped(self):
        assert coerce_answer_value("only", "checkbox") == ChoiceValue(["only"])

    def test_matrix_mapping_is_kept(self):
        value = coerce_answer_value({"Row 1": "Agree"}, "matrix")
        assert value == ChoiceValue({"Row 1": "Agree"})

    def test_file_metadata(self):
        value = coerce_answer_value(
            {"file_name": "cv.pdf", "file_path": "uploads/cv.pdf", "file_type": "application/pdf", "file_size": "2048"},
            "file_upload",
        )
        assert isinstance(value, FileValue)
        assert value.meta.file_size == 2048

    def test_file_requires_mapping_with_name_or_path(self):
        assert isinstance(coerce_answer_value("cv.pdf", "file_upload"), EmptyValue)
        assert isinstance(coerce_answer_value({"file_type": "text/plain"}, "file_upload"), EmptyValue)

    @pytest.mark.parametrize("raw,expected", [(True, True), ("yes", True), (0, False), ("off", False)])
    def test_boolean(self, raw, expected):
        assert coerce_answer_value(raw, "boolean") == BooleanValue(expected)

    def test_boolean_rejects_other_input(self):
        assert isinstance(coerce_answer_value("maybe", "boolean"), EmptyValue)

    def test_payload_columns_clear_every_other_slot(self):
        columns = payload_columns(NumberValue(Decimal("7")))
        assert set(columns) == set(PAYLOAD_COLUMNS)
        assert columns["answer_number"] == Decimal("7")
        assert all(value is None for key, value in columns.items() if key != "answer_number")


class TestSurveyAnswerSlots:

    def test_set_value_clears_previous_slot(self):
        answer = SurveyAnswer(answer_text="stale", answer_json=["x"])
        answer.set_value("5", make_question("number"))

        assert answer.answer_number == Decimal("5")
        assert answer.answer_text is None
        assert answer.answer_json is None

    def test_uninterpretable_number_stores_nothing(self):
        answer = SurveyAnswer(answer_text="old")
        answer.set_value("abc", make_question("number"))

        assert answer.has_value() is False

    def test_set_value_unmarks_skip(self):
        answer = SurveyAnswer(is_skipped=True)
        answer.set_value("Manila", make_question("text"))
        assert answer.is_skipped is False

    def test_empty_value_leaves_skip_flag(self):
        answer = SurveyAnswer(is_skipped=True)
        answer.set_value("not a date", make_question("date"))
        assert answer.is_skipped is True

    def test_formatted_values(self):
        date_answer = SurveyAnswer()
        date_answer.set_value("2020-06-01", make_question("date"))
        assert date_answer.get_formatted_value(make_question("date")) == "2020-06-01"

        rating_answer = SurveyAnswer()
        rating_answer.set_value(5, make_question("rating"))
        assert rating_answer.get_formatted_value(make_question("rating")) == 5

        bool_answer = SurveyAnswer()
        bool_answer.set_value(False, make_question("boolean"))
        assert bool_answer.get_formatted_value(make_question("boolean")) is False

    def test_unset_list_question_formats_as_empty_list(self):
        answer = SurveyAnswer()
        assert answer.get_formatted_value(make_question("checkbox")) == []
        assert answer.get_formatted_value(make_question("text")) is None

    def test_value_is_read_through_question_type(self):
        answer = SurveyAnswer()
        answer.set_value(["a", "b"], make_question("multiple_choice"))
        assert answer.value(make_question("multiple_choice")) == ChoiceValue(["a", "b"])
        # Same row read as a text question exposes no text
        assert isinstance(answer.value(make_question("text")), EmptyValue)
