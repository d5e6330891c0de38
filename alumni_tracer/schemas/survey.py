"""Pydantic schemas for survey response endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, constr

from alumni_tracer.schemas.base import BaseSchema

EmailLike = constr(pattern=r"[^@\s]+@[^@\s]+\.[^@\s]+", min_length=5, max_length=255)
PasswordStr = constr(min_length=1, max_length=128)


class QuestionOption(BaseSchema):
    value: Any
    label: Any


class QuestionSchema(BaseSchema):
    """Active question as shown to respondents."""

    question_id: UUID
    question_text: str
    description: Optional[str] = None
    question_type: str
    is_required: bool
    order: int
    options: list[QuestionOption] = Field(default_factory=list)
    matrix_rows: Optional[list[Any]] = None
    matrix_columns: Optional[list[Any]] = None
    rating_min: Optional[int] = None
    rating_max: Optional[int] = None
    rating_min_label: Optional[str] = None
    rating_max_label: Optional[str] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None


class InvitationSchema(BaseSchema):
    email: str
    name: Optional[str] = None
    student_id: Optional[str] = None


class SurveyDetailResponse(BaseSchema):
    """Survey with its active questions in display order."""

    survey_id: UUID
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    is_anonymous: bool
    allow_multiple_responses: bool
    require_authentication: bool
    is_registration_survey: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    questions: list[QuestionSchema]
    invitation: Optional[InvitationSchema] = None


class StartResponseRequest(BaseModel):
    invitation_token: Optional[str] = Field(default=None, max_length=128)


class StartResponseResult(BaseSchema):
    response_token: str
    response_id: UUID
    status: str
    message: str


class SubmitAnswerRequest(BaseModel):
    """A single answer; ``value`` is interpreted according to the question type."""

    response_token: str = Field(..., min_length=1)
    question_id: UUID
    value: Any = None


class ProgressSchema(BaseSchema):
    total_questions: int
    answered_questions: int
    completion_percentage: float


class SubmitAnswerResponse(BaseSchema):
    answer_id: UUID
    question_id: UUID
    value: Any
    is_skipped: bool
    progress: ProgressSchema


class CompleteResponseRequest(BaseModel):
    """Completion payload; credentials only matter for registration surveys."""

    response_token: str = Field(..., min_length=1)
    email: Optional[EmailLike] = None
    password: Optional[PasswordStr] = None


class CompleteResponseResult(BaseSchema):
    response_id: UUID
    status: str
    completed_at: datetime
    completion_percentage: float
    message: str
    user_id: Optional[UUID] = None
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None


class AnswerRecord(BaseSchema):
    question_id: UUID
    question_text: str
    question_type: str
    value: Any
    is_skipped: bool
    answered_at: datetime


class ResponseProgressResponse(BaseSchema):
    """Current state of a response session with every stored answer."""

    response_id: UUID
    survey_id: UUID
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    last_updated_at: datetime
    total_questions: int
    answered_questions: int
    completion_percentage: float
    answers: list[AnswerRecord]
