"""Tests for activity log entries and entity references."""
import uuid

import pytest

from alumni_tracer.models.activity_log import ActivityLog
from alumni_tracer.models.base import EntityKind
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.services.activity_log_service import (
    ActivityLogService,
    EntityRef,
    EntityRepository,
    RequestContext,
)
from alumni_tracer.services.response_service import SurveyResponseService


@pytest.mark.asyncio
async def test_record_and_resolve(db_session, survey_factory):
    survey, _ = await survey_factory()
    service = ActivityLogService(db_session)

    entry = service.record(
        "survey_published",
        "Published survey",
        entity=EntityRef(EntityKind.SURVEY, survey.survey_id),
        details={"source": "test"},
        context=RequestContext(ip_address="10.0.0.1", user_agent="pytest"),
    )
    await db_session.commit()

    assert entry.entity_kind == "survey"
    assert entry.ip_address == "10.0.0.1"
    resolved = await service.resolve(entry)
    assert isinstance(resolved, Survey)
    assert resolved.survey_id == survey.survey_id


@pytest.mark.asyncio
async def test_resolve_unknown_kind_returns_none(db_session):
    service = ActivityLogService(db_session)
    entry = ActivityLog(action="legacy", description="old row", entity_kind="App\\Models\\Thing", entity_id=uuid.uuid4())

    assert await service.resolve(entry) is None


@pytest.mark.asyncio
async def test_repository_only_resolves_registered_kinds(db_session, survey_factory):
    survey, _ = await survey_factory()
    repository = EntityRepository(db_session, models={EntityKind.SURVEY_RESPONSE: SurveyResponse})

    assert await repository.get(EntityRef(EntityKind.SURVEY, survey.survey_id)) is None


@pytest.mark.asyncio
async def test_entry_without_entity(db_session):
    service = ActivityLogService(db_session)
    entry = service.record("noop", "Nothing referenced")

    assert entry.entity_kind is None
    assert await service.resolve(entry) is None


@pytest.mark.asyncio
async def test_authenticated_start_is_logged(db_session, survey_factory, user_factory):
    survey, _ = await survey_factory()
    user = await user_factory()

    result = await SurveyResponseService(db_session).start_response(
        survey.survey_id, user=user, context=RequestContext(ip_address="192.168.1.5")
    )

    ref = EntityRef(EntityKind.SURVEY_RESPONSE, result.response.response_id)
    entries = await ActivityLogService(db_session).entries_for(ref)
    assert [entry.action for entry in entries] == ["survey_started"]
    assert entries[0].user_id == user.user_id
    assert entries[0].ip_address == "192.168.1.5"


@pytest.mark.asyncio
async def test_anonymous_start_is_not_logged(db_session, survey_factory):
    survey, _ = await survey_factory()
    result = await SurveyResponseService(db_session).start_response(survey.survey_id)

    ref = EntityRef(EntityKind.SURVEY_RESPONSE, result.response.response_id)
    assert await ActivityLogService(db_session).entries_for(ref) == []
