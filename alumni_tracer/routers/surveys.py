"""Router handling survey response sessions."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.database import get_db
from alumni_tracer.dependencies import get_optional_user, get_request_context
from alumni_tracer.models.survey_question import SurveyQuestion
from alumni_tracer.models.user import User
from alumni_tracer.schemas.survey import (
    AnswerRecord,
    CompleteResponseRequest,
    CompleteResponseResult,
    InvitationSchema,
    ProgressSchema,
    QuestionOption,
    QuestionSchema,
    ResponseProgressResponse,
    StartResponseRequest,
    StartResponseResult,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
    SurveyDetailResponse,
)
from alumni_tracer.services.activity_log_service import RequestContext
from alumni_tracer.services.response_service import SurveyResponseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/surveys", tags=["surveys"])


def _question_schema(question: SurveyQuestion) -> QuestionSchema:
    return QuestionSchema(
        question_id=question.question_id,
        question_text=question.question_text,
        description=question.description,
        question_type=question.question_type,
        is_required=question.is_required,
        order=question.order,
        options=[QuestionOption(**option) for option in question.formatted_options],
        matrix_rows=question.matrix_rows,
        matrix_columns=question.matrix_columns,
        rating_min=question.rating_min,
        rating_max=question.rating_max,
        rating_min_label=question.rating_min_label,
        rating_max_label=question.rating_max_label,
        placeholder=question.placeholder,
        help_text=question.help_text,
    )


@router.get("/{survey_id}", response_model=SurveyDetailResponse)
async def get_survey(
    survey_id: UUID,
    token: str | None = Query(default=None, max_length=128),
    db: AsyncSession = Depends(get_db),
) -> SurveyDetailResponse:
    """Return an available survey and its active questions.

    ``token`` is an invitation token; following it marks the invitation clicked.
    """
    view = await SurveyResponseService(db).get_survey_view(survey_id, token)
    survey = view.survey
    invitation = None
    if view.invitation is not None:
        invitation = InvitationSchema(
            email=view.invitation.email,
            name=view.invitation.name,
            student_id=view.invitation.student_id,
        )

    return SurveyDetailResponse(
        survey_id=survey.survey_id,
        title=survey.title,
        description=survey.description,
        instructions=survey.instructions,
        is_anonymous=survey.is_anonymous,
        allow_multiple_responses=survey.allow_multiple_responses,
        require_authentication=survey.require_authentication,
        is_registration_survey=survey.is_registration_survey,
        start_date=survey.start_date,
        end_date=survey.end_date,
        questions=[_question_schema(question) for question in view.questions],
        invitation=invitation,
    )


@router.post(
    "/{survey_id}/responses",
    response_model=StartResponseResult,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": StartResponseResult}},
)
async def start_response(
    survey_id: UUID,
    request_body: StartResponseRequest | None = None,
    user: User | None = Depends(get_optional_user),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
):
    """Open a response session and return its token.

    Returns 409 with the existing token when the caller has already started a
    survey that allows a single response.
    """
    invitation_token = request_body.invitation_token if request_body else None
    result = await SurveyResponseService(db).start_response(
        survey_id, user=user, invitation_token=invitation_token, context=context
    )
    response = result.response

    if not result.created:
        body = StartResponseResult(
            response_token=response.response_token,
            response_id=response.response_id,
            status=response.status,
            message="You have already started this survey",
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json"))

    return StartResponseResult(
        response_token=response.response_token,
        response_id=response.response_id,
        status=response.status,
        message="Survey started",
    )


@router.post("/{survey_id}/answers", response_model=SubmitAnswerResponse)
async def submit_answer(
    survey_id: UUID,
    submission: SubmitAnswerRequest,
    db: AsyncSession = Depends(get_db),
) -> SubmitAnswerResponse:
    """Save one answer and return the session's updated progress."""
    service = SurveyResponseService(db)
    await service.get_response(submission.response_token, survey_id)

    result = await service.submit_answer(submission.response_token, submission.question_id, submission.value)
    return SubmitAnswerResponse(
        answer_id=result.answer.answer_id,
        question_id=result.answer.question_id,
        value=result.value,
        is_skipped=result.answer.is_skipped,
        progress=ProgressSchema(
            total_questions=result.progress.total,
            answered_questions=result.progress.answered,
            completion_percentage=result.progress.percentage,
        ),
    )


@router.post("/{survey_id}/complete", response_model=CompleteResponseResult)
async def complete_response(
    survey_id: UUID,
    submission: CompleteResponseRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
) -> CompleteResponseResult:
    """Complete the session; registration surveys create an account from the answers."""
    service = SurveyResponseService(db)
    await service.get_response(submission.response_token, survey_id)

    result = await service.complete_response(
        submission.response_token,
        email=submission.email,
        password=submission.password,
        context=context,
    )
    response = result.response
    return CompleteResponseResult(
        response_id=response.response_id,
        status=response.status,
        completed_at=response.completed_at,
        completion_percentage=response.completion_percentage,
        message="Thank you for completing the survey!",
        user_id=result.user.user_id if result.user else None,
        access_token=result.access_token,
        token_type="bearer" if result.access_token else None,
        expires_in=result.expires_in,
    )


@router.get("/{survey_id}/progress", response_model=ResponseProgressResponse)
async def get_progress(
    survey_id: UUID,
    response_token: str = Query(..., min_length=1, max_length=128),
    db: AsyncSession = Depends(get_db),
) -> ResponseProgressResponse:
    service = SurveyResponseService(db)
    await service.get_response(response_token, survey_id)
    view = await service.get_progress(response_token)
    response = view.response

    return ResponseProgressResponse(
        response_id=response.response_id,
        survey_id=response.survey_id,
        status=response.status,
        started_at=response.started_at,
        completed_at=response.completed_at,
        last_updated_at=response.last_updated_at,
        total_questions=response.total_questions,
        answered_questions=response.answered_questions,
        completion_percentage=response.completion_percentage,
        answers=[
            AnswerRecord(
                question_id=answer.question_id,
                question_text=answer.question_text,
                question_type=answer.question_type,
                value=answer.value,
                is_skipped=answer.is_skipped,
                answered_at=answer.answered_at,
            )
            for answer in view.answers
        ],
    )

