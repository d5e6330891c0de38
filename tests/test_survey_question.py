"""Tests for question definition helpers."""
from alumni_tracer.models.survey_question import SurveyQuestion


def test_choice_type_detection():
    assert SurveyQuestion(question_type="dropdown").is_choice_type()
    assert SurveyQuestion(question_type="checkbox").is_choice_type()
    assert not SurveyQuestion(question_type="matrix").is_choice_type()
    assert not SurveyQuestion(question_type="text").is_choice_type()


def test_multiple_answers():
    assert SurveyQuestion(question_type="multiple_choice").accepts_multiple_answers()
    assert SurveyQuestion(question_type="checkbox").accepts_multiple_answers()
    assert not SurveyQuestion(question_type="single_choice").accepts_multiple_answers()


def test_plain_options_use_position_as_value():
    question = SurveyQuestion(question_type="single_choice", options=["Yes", "No"])
    assert question.formatted_options == [
        {"value": 0, "label": "Yes"},
        {"value": 1, "label": "No"},
    ]


def test_mapping_options_keep_their_keys():
    question = SurveyQuestion(
        question_type="dropdown",
        options=[{"value": "ft", "label": "Full-time"}, {"label": "Other"}],
    )
    assert question.formatted_options == [
        {"value": "ft", "label": "Full-time"},
        {"value": 1, "label": "Other"},
    ]


def test_non_choice_questions_have_no_options():
    question = SurveyQuestion(question_type="text", options=["ignored"])
    assert question.formatted_options == []
