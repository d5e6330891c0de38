"""Activity log recording.

Entries point at the record they describe through an explicit
``(EntityKind, id)`` pair. Resolving that pair back into a model instance goes
through an :class:`EntityRepository`, so the set of loggable entities is a
closed, declared mapping rather than arbitrary class names stored in the row.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.models.activity_log import ActivityLog
from alumni_tracer.models.alumni_profile import AlumniProfile
from alumni_tracer.models.base import EntityKind
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.models.user import User

logger = logging.getLogger(__name__)

ACTION_SURVEY_STARTED = "survey_started"
ACTION_SURVEY_COMPLETED = "survey_completed"
ACTION_USER_REGISTERED = "user_registered_via_survey"


@dataclass(frozen=True)
class EntityRef:
    kind: EntityKind
    id: UUID


@dataclass(frozen=True)
class RequestContext:
    """Client details copied onto log entries."""

    ip_address: str | None = None
    user_agent: str | None = None


DEFAULT_ENTITY_MODELS: dict[EntityKind, type] = {
    EntityKind.SURVEY: Survey,
    EntityKind.SURVEY_RESPONSE: SurveyResponse,
    EntityKind.USER: User,
    EntityKind.ALUMNI_PROFILE: AlumniProfile,
}


class EntityRepository:
    """Loads the model instance an :class:`EntityRef` points at."""

    def __init__(self, db: AsyncSession, models: Mapping[EntityKind, type] | None = None):
        self.db = db
        self.models = dict(models or DEFAULT_ENTITY_MODELS)

    async def get(self, ref: EntityRef) -> Any | None:
        model = self.models.get(ref.kind)
        if model is None:
            return None
        return await self.db.get(model, ref.id)


class ActivityLogService:
    def __init__(self, db: AsyncSession, repository: EntityRepository | None = None):
        self.db = db
        self.repository = repository or EntityRepository(db)

    def record(
        self,
        action: str,
        description: str,
        *,
        user_id: UUID | None = None,
        entity: EntityRef | None = None,
        details: dict[str, Any] | None = None,
        context: RequestContext | None = None,
    ) -> ActivityLog:
        """Add a log entry to the current transaction."""
        context = context or RequestContext()
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_kind=entity.kind.value if entity else None,
            entity_id=entity.id if entity else None,
            description=description,
            details=details,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        self.db.add(entry)
        logger.debug(f"Activity {action} recorded for user {user_id}")
        return entry

    def log_survey_started(
        self, response: SurveyResponse, survey: Survey, user_id: UUID, context: RequestContext | None = None
    ) -> ActivityLog:
        return self.record(
            ACTION_SURVEY_STARTED,
            f"Started survey: {survey.title}",
            user_id=user_id,
            entity=EntityRef(EntityKind.SURVEY_RESPONSE, response.response_id),
            context=context,
        )

    def log_survey_completed(
        self, response: SurveyResponse, survey: Survey, context: RequestContext | None = None
    ) -> ActivityLog:
        return self.record(
            ACTION_SURVEY_COMPLETED,
            f"Completed survey: {survey.title}",
            user_id=response.user_id,
            entity=EntityRef(EntityKind.SURVEY_RESPONSE, response.response_id),
            details={
                "survey_id": str(survey.survey_id),
                "answered_questions": response.answered_questions,
                "total_questions": response.total_questions,
            },
            context=context,
        )

    def log_registration(
        self, user: User, survey: Survey, context: RequestContext | None = None
    ) -> ActivityLog:
        return self.record(
            ACTION_USER_REGISTERED,
            f"User registered through survey: {survey.title}",
            user_id=user.user_id,
            entity=EntityRef(EntityKind.USER, user.user_id),
            details={"survey_id": str(survey.survey_id)},
            context=context,
        )

    async def resolve(self, entry: ActivityLog) -> Any | None:
        """Model instance the entry refers to, or None when absent or unknown."""
        if entry.entity_kind is None or entry.entity_id is None:
            return None
        try:
            kind = EntityKind(entry.entity_kind)
        except ValueError:
            logger.warning(f"Activity log {entry.log_id} has unknown entity kind {entry.entity_kind!r}")
            return None
        return await self.repository.get(EntityRef(kind, entry.entity_id))

    async def entries_for(self, ref: EntityRef) -> list[ActivityLog]:
        result = await self.db.execute(
            select(ActivityLog)
            .where(
                ActivityLog.entity_kind == ref.kind.value,
                ActivityLog.entity_id == ref.id,
            )
            .order_by(ActivityLog.created_at)
        )
        return list(result.scalars().all())
