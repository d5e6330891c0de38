"""Account and profile creation from a completed registration survey."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping
from uuid import UUID

from sqlalchemy import Numeric, select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.models.alumni_profile import AlumniProfile
from alumni_tracer.models.base import EmploymentStatus, UserRole
from alumni_tracer.models.batch import Batch
from alumni_tracer.models.survey import Survey
from alumni_tracer.models.survey_answer import SurveyAnswer
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.survey_response import SurveyResponse
from alumni_tracer.models.answer_value import fit_numeric, is_blank, parse_date, parse_decimal
from alumni_tracer.models.user import User
from alumni_tracer.services.activity_log_service import ActivityLogService, RequestContext
from alumni_tracer.services.user_service import UserService
from alumni_tracer.utils.datetime_helpers import utc_now

logger = logging.getLogger(__name__)

# Ordered: an answer fills the first field whose keyword occurs in its question text.
FIELD_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("first_name", ("first name",)),
    ("last_name", ("last name",)),
    ("student_id", ("student id",)),
    ("phone", ("phone number", "phone")),
    ("birth_date", ("date of birth", "birth date")),
    ("gender", ("gender",)),
    ("degree_program", ("degree program", "degree")),
    ("major", ("major",)),
    ("graduation_year", ("graduation year", "graduation")),
    ("gpa", ("gpa",)),
    ("employment_status", ("employment status", "employment")),
    ("current_job_title", ("job title", "current job")),
    ("current_employer", ("employer", "company")),
    ("current_salary", ("salary",)),
    ("current_address", ("address",)),
    ("city", ("city",)),
    ("country", ("country",)),
)

EMPLOYMENT_STATUS_MAP: dict[str, EmploymentStatus] = {
    "employed full-time": EmploymentStatus.EMPLOYED_FULL_TIME,
    "employed part-time": EmploymentStatus.EMPLOYED_PART_TIME,
    "self-employed": EmploymentStatus.SELF_EMPLOYED,
    "unemployed (seeking work)": EmploymentStatus.UNEMPLOYED_SEEKING,
    "unemployed (not seeking work)": EmploymentStatus.UNEMPLOYED_NOT_SEEKING,
    "continuing education": EmploymentStatus.CONTINUING_EDUCATION,
    "military service": EmploymentStatus.MILITARY_SERVICE,
}

DATE_FIELDS = {"birth_date"}
DECIMAL_FIELDS = {"gpa", "current_salary"}
INTEGER_FIELDS = {"graduation_year"}

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
MAX_YEAR = 9999


def match_profile_field(question_text: str) -> str | None:
    """Profile field a question feeds, by case-insensitive keyword match."""
    lowered = (question_text or "").lower()
    for field, keywords in FIELD_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return field
    return None


def map_employment_status(raw: Any) -> str:
    text = str(raw).strip().lower()
    mapped = EMPLOYMENT_STATUS_MAP.get(text)
    if mapped is not None:
        return mapped.value
    # Already a stored code, e.g. "self_employed"
    if text in {status.value for status in EmploymentStatus}:
        return text
    return EmploymentStatus.OTHER.value


def _flatten(raw: Any) -> Any:
    if isinstance(raw, (list, tuple)):
        return ", ".join(str(item) for item in raw if not is_blank(item))
    return raw


def _parse_year(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        year = raw
    else:
        number = parse_decimal(raw, max_integer_digits=4)
        if number is not None:
            year = int(number)
        else:
            match = _YEAR_PATTERN.search(str(raw))
            year = int(match.group(1)) if match else None
    if year is None or not 0 < year <= MAX_YEAR:
        return None
    return year


def _fit_column(field: str, value: Any) -> Any:
    """``value`` if the profile column can hold it, otherwise None."""
    if value is None:
        return None
    column_type = AlumniProfile.__table__.c[field].type
    if isinstance(column_type, Numeric):
        fitted = fit_numeric(value, column_type.precision, column_type.scale)
    elif isinstance(value, str) and getattr(column_type, "length", None) and len(value) > column_type.length:
        fitted = None
    else:
        fitted = value
    if fitted is None:
        logger.debug(f"Dropping {field} answer: does not fit the profile column")
    return fitted


def _coerce_profile_value(field: str, raw: Any) -> Any:
    """Convert a formatted answer into the profile column's type; None when it does not fit."""
    return _fit_column(field, _coerce_raw(field, raw))


def _coerce_raw(field: str, raw: Any) -> Any:
    raw = _flatten(raw)
    if is_blank(raw):
        return None

    if field == "employment_status":
        return map_employment_status(raw)
    if field == "gender":
        return str(raw).strip().lower()
    if field in DATE_FIELDS:
        return parse_date(raw)
    if field in INTEGER_FIELDS:
        return _parse_year(raw)
    if field in DECIMAL_FIELDS:
        if isinstance(raw, str):
            raw = raw.replace(",", "")
        return parse_decimal(raw)
    return str(raw).strip()


def project_answers_to_profile(
    answers: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> dict[str, Any]:
    """Map ``(question_text, formatted_value)`` pairs onto profile field values.

    >>> project_answers_to_profile({"First Name": "Ana", "Employment Status": "Employed Full-time"})
    {'first_name': 'Ana', 'employment_status': 'employed_full_time'}
    """
    pairs = answers.items() if isinstance(answers, Mapping) else answers
    fields: dict[str, Any] = {}
    for question_text, raw in pairs:
        field = match_profile_field(question_text)
        if field is None:
            continue
        value = _coerce_profile_value(field, raw)
        if value is None:
            continue
        fields[field] = value
    return fields


@dataclass
class RegistrationResult:
    user: User
    profile: AlumniProfile


class RegistrationService:
    """Turns a registration survey response into an alumni account."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        user_service: UserService | None = None,
        activity_log: ActivityLogService | None = None,
    ):
        self.db = db
        self.user_service = user_service or UserService(db)
        self.activity_log = activity_log or ActivityLogService(db)

    async def collect_answers(self, response: SurveyResponse) -> list[tuple[str, Any]]:
        """Formatted answers of the response in question order."""
        result = await self.db.execute(
            select(SurveyAnswer, SurveyQuestion)
            .join(SurveyQuestion, SurveyQuestion.question_id == SurveyAnswer.question_id)
            .where(SurveyAnswer.response_id == response.response_id)
            .order_by(SurveyQuestion.order, SurveyQuestion.created_at)
        )
        return [
            (question.question_text, answer.get_formatted_value(question))
            for answer, question in result.all()
        ]

    async def find_batch(self, graduation_year: int | None) -> Batch | None:
        if graduation_year is None:
            return None
        result = await self.db.execute(
            select(Batch)
            .where(Batch.graduation_year == graduation_year)
            .order_by(Batch.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def register_from_response(
        self,
        response: SurveyResponse,
        email: str,
        password: str,
        *,
        now: datetime | None = None,
        context: RequestContext | None = None,
    ) -> RegistrationResult:
        """Create the account and completed profile, and bind the response to it.

        Works inside the caller's transaction. Raises ``EmailAlreadyExists``
        before anything is written when the email is taken.
        """
        now = now or utc_now()
        user = await self.user_service.create_user(email, password, role=UserRole.ALUMNI)

        fields = project_answers_to_profile(await self.collect_answers(response))
        batch = await self.find_batch(fields.get("graduation_year"))

        profile = AlumniProfile(
            user_id=user.user_id,
            batch_id=batch.batch_id if batch else None,
            profile_completed=True,
            profile_completed_at=now,
            **fields,
        )
        self.db.add(profile)
        response.user_id = user.user_id
        await self.db.flush()

        survey = await self.db.get(Survey, response.survey_id)
        self.activity_log.log_registration(user, survey, context)

        logger.info(
            f"Registered user {user.user_id} from response {response.response_id} "
            f"({len(fields)} profile fields, batch={batch.batch_id if batch else None})"
        )
        return RegistrationResult(user=user, profile=profile)

    async def get_profile(self, user_id: UUID) -> AlumniProfile | None:
        result = await self.db.execute(
            select(AlumniProfile).where(AlumniProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()
