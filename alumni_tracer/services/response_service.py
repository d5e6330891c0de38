"""Survey response sessions: start, answer, complete."""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.config import get_settings
from alumni_tracer.models.alumni_profile import AlumniProfile
from alumni_tracer.models.answer_value import (
    EMPTY,
    EmptyValue,
    coerce_answer_value,
    is_blank,
    payload_columns,
)
from alumni_tracer.models.base import ResponseStatus
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_answer import SurveyAnswer
from alumni_tracer.models.survey_invitation import SurveyInvitation
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.models.user import User
from alumni_tracer.services.activity_log_service import ActivityLogService, RequestContext
from alumni_tracer.services.auth_service import AuthService
from alumni_tracer.services.invitation_service import InvitationService, ReminderPolicy
from alumni_tracer.services.progress_service import ProgressService, ProgressSnapshot
from alumni_tracer.services.registration_service import RegistrationService
from alumni_tracer.services.survey_service import SurveyService
from alumni_tracer.utils.datetime_helpers import utc_now
from alumni_tracer.utils.exceptions import (
    AuthenticationRequired,
    InvalidInvitation,
    QuestionNotFound,
    RequiredFieldEmpty,
    SessionAlreadyCompleted,
    SessionNotFound,
    SurveyFlowError,
)

logger = logging.getLogger(__name__)

COMPLETED_PERCENTAGE = Decimal("100.00")


@dataclass
class SurveyView:
    survey: Survey
    questions: list[SurveyQuestion]
    invitation: SurveyInvitation | None = None


@dataclass
class StartResult:
    response: SurveyResponse
    created: bool


@dataclass
class AnswerResult:
    answer: SurveyAnswer
    value: Any
    progress: ProgressSnapshot


@dataclass
class CompletionResult:
    response: SurveyResponse
    user: User | None = None
    profile: AlumniProfile | None = None
    access_token: str | None = None
    expires_in: int | None = None


@dataclass
class AnswerView:
    question_id: UUID
    question_text: str
    question_type: str
    value: Any
    is_skipped: bool
    answered_at: datetime


@dataclass
class ProgressView:
    response: SurveyResponse
    answers: list[AnswerView] = field(default_factory=list)


class SurveyResponseService:
    """Drives a response session from start to completion.

    Every public mutation commits on success and rolls back before raising.
    """

    def __init__(self, db: AsyncSession, *, reminder_policy: ReminderPolicy | None = None):
        self.db = db
        self.settings = get_settings()
        self.surveys = SurveyService(db)
        self.progress = ProgressService(db)
        self.invitations = InvitationService(db, reminder_policy)
        self.activity_log = ActivityLogService(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    async def _get_response_by_token(self, response_token: str) -> SurveyResponse:
        result = await self.db.execute(
            select(SurveyResponse).where(SurveyResponse.response_token == response_token)
        )
        response = result.scalar_one_or_none()
        if response is None:
            raise SessionNotFound("Response session not found")
        return response

    async def get_response(self, response_token: str, survey_id: UUID | None = None) -> SurveyResponse:
        """Session for the token; a token issued for another survey is not found."""
        response = await self._get_response_by_token(response_token)
        if survey_id is not None and response.survey_id != survey_id:
            logger.warning(f"Response token used against survey {survey_id} it does not belong to")
            raise SessionNotFound("Response session not found")
        return response

    async def _get_open_response(self, response_token: str) -> SurveyResponse:
        response = await self._get_response_by_token(response_token)
        if response.status != ResponseStatus.IN_PROGRESS.value:
            raise SessionAlreadyCompleted("Survey already completed")
        return response

    async def _get_answerable_question(self, response: SurveyResponse, question_id: UUID) -> SurveyQuestion:
        question = await self.db.get(SurveyQuestion, question_id)
        if question is None or question.survey_id != response.survey_id or not question.is_active:
            raise QuestionNotFound("Question not found")
        return question

    async def _find_existing_response(self, survey_id: UUID, user_id: UUID) -> SurveyResponse | None:
        result = await self.db.execute(
            select(SurveyResponse)
            .where(
                SurveyResponse.survey_id == survey_id,
                SurveyResponse.user_id == user_id,
            )
            .order_by(SurveyResponse.started_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _respondent_snapshot(
        self, user: User | None, invitation: SurveyInvitation | None
    ) -> tuple[str | None, str | None, str | None]:
        if invitation is not None:
            return invitation.email, invitation.name, invitation.student_id
        if user is None:
            return None, None, None

        result = await self.db.execute(
            select(AlumniProfile).where(AlumniProfile.user_id == user.user_id)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            return user.email, None, None
        return user.email, profile.full_name or None, profile.student_id

    # ------------------------------------------------------------------
    # Survey display
    # ------------------------------------------------------------------
    async def get_survey_view(
        self, survey_id: UUID, invitation_token: str | None = None, now: datetime | None = None
    ) -> SurveyView:
        """Survey with its active questions, recording an invitation click when a token is given."""
        now = now or utc_now()
        try:
            survey = await self.surveys.get_available_survey(survey_id, now)

            invitation = None
            if invitation_token:
                invitation = await self.invitations.find_for_survey(survey_id, invitation_token)
                if invitation is None:
                    raise InvalidInvitation("Invalid invitation token")
                if self.invitations.mark_clicked(invitation, now):
                    await self.db.commit()

            questions = await self.surveys.get_active_questions(survey_id)
        except SurveyFlowError:
            await self.db.rollback()
            raise

        return SurveyView(survey=survey, questions=questions, invitation=invitation)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    async def start_response(
        self,
        survey_id: UUID,
        user: User | None = None,
        invitation_token: str | None = None,
        context: RequestContext | None = None,
        now: datetime | None = None,
    ) -> StartResult:
        """Open a response session, or return the caller's existing one.

        An authenticated caller on a survey that forbids multiple responses
        gets their latest session back with ``created=False``.
        """
        now = now or utc_now()
        context = context or RequestContext()
        try:
            survey = await self.surveys.get_available_survey(survey_id, now)

            if survey.require_authentication and user is None:
                raise AuthenticationRequired("Authentication required")

            if user is not None and not survey.allow_multiple_responses:
                existing = await self._find_existing_response(survey_id, user.user_id)
                if existing is not None:
                    logger.info(f"User {user.user_id} already has response {existing.response_id} for survey {survey_id}")
                    return StartResult(response=existing, created=False)

            # Unknown tokens are ignored here; only the survey page rejects them
            invitation = await self.invitations.find_for_survey(survey_id, invitation_token)
            email, name, student_id = await self._respondent_snapshot(user, invitation)

            response = SurveyResponse(
                survey_id=survey_id,
                user_id=user.user_id if user else None,
                response_token=secrets.token_urlsafe(self.settings.response_token_bytes),
                status=ResponseStatus.IN_PROGRESS.value,
                started_at=now,
                last_updated_at=now,
                respondent_email=email,
                respondent_name=name,
                respondent_student_id=student_id,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
            self.db.add(response)
            await self.db.flush()

            await self.progress.recompute(response, now)
            if user is not None:
                self.activity_log.log_survey_started(response, survey, user.user_id, context)

            await self.db.commit()
        except (SurveyFlowError, SQLAlchemyError):
            await self.db.rollback()
            raise

        logger.info(f"Started response {response.response_id} for survey {survey_id}")
        return StartResult(response=response, created=True)

    def _build_upsert(self, values: dict[str, Any], update_columns: list[str]):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(SurveyAnswer).values(**values)
        else:
            stmt = sqlite_insert(SurveyAnswer).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=["response_id", "question_id"],
            set_={column: stmt.excluded[column] for column in update_columns},
        )

    async def submit_answer(
        self, response_token: str, question_id: UUID, raw: Any, now: datetime | None = None
    ) -> AnswerResult:
        """Store one answer and refresh the session's progress.

        Blank input on an optional question is recorded as a skip. Input the
        question type cannot interpret keeps the row but stores no value.
        """
        now = now or utc_now()
        try:
            response = await self._get_open_response(response_token)
            question = await self._get_answerable_question(response, question_id)

            blank = is_blank(raw)
            if blank and question.is_required:
                raise RequiredFieldEmpty("This field is required")

            value = EMPTY if blank else coerce_answer_value(raw, question.question_type)
            values = {
                "response_id": response.response_id,
                "question_id": question.question_id,
                "answered_at": now,
                **payload_columns(value),
            }
            update_columns = [key for key in values if key not in ("response_id", "question_id")]

            if blank:
                values["is_skipped"] = True
                update_columns.append("is_skipped")
            elif not isinstance(value, EmptyValue):
                values["is_skipped"] = False
                update_columns.append("is_skipped")
            else:
                # Nothing usable was stored; a previous skip flag stands
                values["is_skipped"] = False

            await self.db.execute(self._build_upsert(values, update_columns))

            result = await self.db.execute(
                select(SurveyAnswer)
                .where(
                    SurveyAnswer.response_id == response.response_id,
                    SurveyAnswer.question_id == question.question_id,
                )
                .execution_options(populate_existing=True)
            )
            answer = result.scalar_one()

            snapshot = await self.progress.recompute_if_open(response, now)
            if snapshot is None:
                raise SessionAlreadyCompleted("Survey already completed")
            await self.db.commit()
        except (SurveyFlowError, SQLAlchemyError):
            await self.db.rollback()
            raise

        if isinstance(value, EmptyValue) and not blank:
            logger.warning(
                f"Answer for question {question.question_id} ({question.question_type}) "
                f"could not be interpreted; stored without a value"
            )
        return AnswerResult(answer=answer, value=answer.get_formatted_value(question), progress=snapshot)

    async def complete_response(
        self,
        response_token: str,
        email: str | None = None,
        password: str | None = None,
        context: RequestContext | None = None,
        now: datetime | None = None,
    ) -> CompletionResult:
        """Finish the session; registration surveys also create the respondent's account.

        Unanswered required questions do not block completion.
        """
        now = now or utc_now()
        context = context or RequestContext()
        registration = None
        try:
            response = await self._get_open_response(response_token)
            survey = await self.db.get(Survey, response.survey_id)

            if survey.is_registration_survey and email and password:
                registration = await RegistrationService(
                    self.db, activity_log=self.activity_log
                ).register_from_response(response, email, password, now=now, context=context)

            result = await self.db.execute(
                update(SurveyResponse)
                .where(
                    SurveyResponse.response_id == response.response_id,
                    SurveyResponse.status == ResponseStatus.IN_PROGRESS.value,
                )
                .values(
                    status=ResponseStatus.COMPLETED.value,
                    completed_at=now,
                    last_updated_at=now,
                    completion_percentage=COMPLETED_PERCENTAGE,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise SessionAlreadyCompleted("Survey already completed")

            await self.invitations.mark_responded_for_email(
                survey.survey_id, response.respondent_email or email, now
            )
            self.activity_log.log_survey_completed(response, survey, context)
            await self.surveys.refresh_response_stats(survey)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(response)
        logger.info(f"Completed response {response.response_id} for survey {survey.survey_id}")

        completion = CompletionResult(response=response)
        if registration is not None:
            completion.user = registration.user
            completion.profile = registration.profile
            completion.access_token, completion.expires_in = AuthService(self.settings).create_access_token(
                registration.user
            )
        return completion

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------
    async def get_progress(self, response_token: str) -> ProgressView:
        response = await self._get_response_by_token(response_token)
        result = await self.db.execute(
            select(SurveyAnswer, SurveyQuestion)
            .join(SurveyQuestion, SurveyQuestion.question_id == SurveyAnswer.question_id)
            .where(SurveyAnswer.response_id == response.response_id)
            .order_by(SurveyQuestion.order, SurveyQuestion.created_at)
        )
        answers = [
            AnswerView(
                question_id=question.question_id,
                question_text=question.question_text,
                question_type=question.question_type,
                value=answer.get_formatted_value(question),
                is_skipped=answer.is_skipped,
                answered_at=answer.answered_at,
            )
            for answer, question in result.all()
        ]
        return ProgressView(response=response, answers=answers)
