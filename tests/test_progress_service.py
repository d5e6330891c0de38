"""Tests for completion progress calculation."""
from datetime import datetime, UTC
from decimal import Decimal

import pytest

from alumni_tracer.services.progress_service import ProgressService, completion_percentage
from alumni_tracer.services.response_service import SurveyResponseService


@pytest.mark.parametrize(
    "answered,total,expected",
    [
        (3, 7, Decimal("42.86")),
        (1, 3, Decimal("33.33")),
        (2, 3, Decimal("66.67")),
        (1, 8, Decimal("12.50")),
        (7, 7, Decimal("100.00")),
        (0, 5, Decimal("0.00")),
        (0, 0, Decimal("0.00")),
    ],
)
def test_completion_percentage(answered, total, expected):
    assert completion_percentage(answered, total) == expected


def test_half_values_round_up():
    # 1/16 = 6.25 exactly; 1/32 = 3.125 rounds away from zero
    assert completion_percentage(1, 16) == Decimal("6.25")
    assert completion_percentage(1, 32) == Decimal("3.13")


@pytest.mark.asyncio
async def test_recompute_counts_only_active_questions(db_session, survey_factory):
    survey, questions = await survey_factory(
        questions=[
            {"question_type": "text"},
            {"question_type": "text"},
            {"question_type": "text"},
            {"question_type": "text", "is_active": False},
        ]
    )
    service = SurveyResponseService(db_session)
    started = await service.start_response(survey.survey_id)
    token = started.response.response_token

    await service.submit_answer(token, questions[0].question_id, "one")
    result = await service.submit_answer(token, questions[1].question_id, "two")

    assert result.progress.total == 3
    assert result.progress.answered == 2
    assert result.progress.percentage == Decimal("66.67")


@pytest.mark.asyncio
async def test_recompute_is_idempotent(db_session, survey_factory):
    survey, questions = await survey_factory(questions=[{"question_type": "text"}] * 7)
    service = SurveyResponseService(db_session)
    started = await service.start_response(survey.survey_id)
    token = started.response.response_token
    for question in questions[:3]:
        await service.submit_answer(token, question.question_id, "x")

    response = started.response
    progress = ProgressService(db_session)
    now = datetime.now(UTC)
    first = await progress.recompute(response, now)
    second = await progress.recompute(response, now)

    assert first == second
    assert response.total_questions == 7
    assert response.answered_questions == 3
    assert response.completion_percentage == Decimal("42.86")


@pytest.mark.asyncio
async def test_survey_without_questions_has_zero_progress(db_session, survey_factory):
    survey, _ = await survey_factory()
    started = await SurveyResponseService(db_session).start_response(survey.survey_id)

    assert started.response.total_questions == 0
    assert started.response.completion_percentage == Decimal("0.00")


@pytest.mark.asyncio
async def test_guarded_recompute_skips_closed_sessions(db_session, survey_factory):
    survey, _ = await survey_factory(questions=[{"question_type": "text"}] * 2)
    service = SurveyResponseService(db_session)
    started = await service.start_response(survey.survey_id)
    await service.complete_response(started.response.response_token)

    response = started.response
    assert await ProgressService(db_session).recompute_if_open(response) is None

    await db_session.refresh(response)
    assert response.status == "completed"
    assert response.completion_percentage == Decimal("100.00")


@pytest.mark.asyncio
async def test_guarded_recompute_updates_open_sessions(db_session, survey_factory):
    survey, _ = await survey_factory(questions=[{"question_type": "text"}] * 4)
    started = await SurveyResponseService(db_session).start_response(survey.survey_id)
    now = datetime(2026, 5, 4, 9, 30, tzinfo=UTC)

    snapshot = await ProgressService(db_session).recompute_if_open(started.response, now)

    assert snapshot.total == 4
    assert snapshot.answered == 0
    assert started.response.last_updated_at == now
