"""Tests for projecting registration survey answers into accounts and profiles."""
from datetime import date
from decimal import Decimal
import uuid

import pytest
from sqlalchemy import select

from alumni_tracer.models.activity_log import ActivityLog
from alumni_tracer.models.batch import Batch
from alumni_tracer.models.user import User
from alumni_tracer.services.auth_service import AuthService
from alumni_tracer.services.registration_service import (
    RegistrationService,
    map_employment_status,
    match_profile_field,
    project_answers_to_profile,
)
from alumni_tracer.services.response_service import SurveyResponseService
from alumni_tracer.utils.exceptions import EmailAlreadyExists
from alumni_tracer.utils.passwords import PasswordValidationError, verify_password

REGISTRATION_QUESTIONS = [
    {"question_text": "First Name", "question_type": "text"},
    {"question_text": "Last Name", "question_type": "text"},
    {"question_text": "Date of Birth", "question_type": "date"},
    {"question_text": "Graduation Year", "question_type": "number"},
    {"question_text": "Employment Status", "question_type": "single_choice"},
    {"question_text": "Monthly Salary", "question_type": "number"},
    {"question_text": "Gender", "question_type": "dropdown"},
]


def email_for(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


class TestProjection:

    def test_basic_projection(self):
        fields = project_answers_to_profile(
            {"First Name": "Ana", "Employment Status": "Employed Full-time"}
        )
        assert fields == {"first_name": "Ana", "employment_status": "employed_full_time"}

    def test_keyword_match_is_case_insensitive(self):
        assert match_profile_field("what is your FIRST NAME?") == "first_name"
        assert match_profile_field("Current Employer / Company") == "current_employer"
        assert match_profile_field("Favourite colour") is None

    def test_first_matching_field_wins(self):
        # "Current Job Title" must not fall through to the employer field
        assert match_profile_field("Current Job Title") == "current_job_title"
        assert match_profile_field("Degree Program") == "degree_program"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Self-employed", "self_employed"),
            ("Unemployed (seeking work)", "unemployed_seeking"),
            ("military service", "military_service"),
            ("continuing_education", "continuing_education"),
            ("Freelance astronaut", "other"),
        ],
    )
    def test_employment_vocabulary(self, raw, expected):
        assert map_employment_status(raw) == expected

    def test_values_are_coerced_to_column_types(self):
        fields = project_answers_to_profile([
            ("Date of Birth", "1998-04-02"),
            ("Graduation Year", Decimal("2020")),
            ("GPA", "3.75"),
            ("Salary", "45,000.50"),
            ("Gender", "Female"),
        ])
        assert fields == {
            "birth_date": date(1998, 4, 2),
            "graduation_year": 2020,
            "gpa": Decimal("3.75"),
            "current_salary": Decimal("45000.50"),
            "gender": "female",
        }

    def test_graduation_year_from_free_text(self):
        assert project_answers_to_profile({"Graduation": "Class of 2019"}) == {"graduation_year": 2019}

    def test_empty_and_uncoercible_values_are_left_unset(self):
        fields = project_answers_to_profile({
            "First Name": "  ",
            "Last Name": None,
            "GPA": "excellent",
            "City": [],
        })
        assert fields == {}

    def test_list_answers_are_joined(self):
        assert project_answers_to_profile({"Major": ["Math", "Physics"]}) == {"major": "Math, Physics"}

    @pytest.mark.parametrize(
        "answers",
        [
            {"GPA": "100"},
            {"GPA": "1e1000000"},
            {"Salary": "12345678901"},
            {"First Name": "A" * 101},
            {"City": "x" * 101},
            {"Country": "y" * 101},
            {"Gender": "f" * 31},
            {"Graduation Year": "1e1000000"},
            {"Graduation Year": 10 ** 12},
        ],
    )
    def test_values_that_overflow_their_column_are_left_unset(self, answers):
        assert project_answers_to_profile(answers) == {}

    def test_values_at_the_column_limits_are_kept(self):
        fields = project_answers_to_profile({
            "GPA": "3.756",
            "Salary": "9999999999.99",
            "First Name": "A" * 100,
        })
        assert fields == {
            "gpa": Decimal("3.76"),
            "current_salary": Decimal("9999999999.99"),
            "first_name": "A" * 100,
        }


class TestRegistrationFlow:

    async def _answer_registration_survey(self, db_session, survey_factory, answers):
        survey, questions = await survey_factory(
            questions=REGISTRATION_QUESTIONS, is_registration_survey=True
        )
        service = SurveyResponseService(db_session)
        token = (await service.start_response(survey.survey_id)).response.response_token
        by_text = {question.question_text: question for question in questions}
        for text, value in answers.items():
            await service.submit_answer(token, by_text[text].question_id, value)
        return service, survey, token

    @pytest.mark.asyncio
    async def test_completion_creates_account_and_profile(self, db_session, survey_factory):
        batch = Batch(name="Class of 2031", graduation_year=2031)
        db_session.add(batch)
        await db_session.commit()

        service, survey, token = await self._answer_registration_survey(
            db_session,
            survey_factory,
            {
                "First Name": "Ana",
                "Last Name": "Reyes",
                "Date of Birth": "1999-01-20",
                "Graduation Year": "2031",
                "Employment Status": "Employed Full-time",
                "Gender": "Female",
            },
        )
        email = email_for("ana")

        result = await service.complete_response(token, email=email.upper(), password="secret123")

        assert result.user is not None
        assert result.user.email == email
        assert result.user.role == "alumni"
        assert verify_password("secret123", result.user.password_hash)
        assert result.response.user_id == result.user.user_id

        profile = await RegistrationService(db_session).get_profile(result.user.user_id)
        assert profile.first_name == "Ana"
        assert profile.last_name == "Reyes"
        assert profile.birth_date == date(1999, 1, 20)
        assert profile.graduation_year == 2031
        assert profile.employment_status == "employed_full_time"
        assert profile.gender == "female"
        assert profile.batch_id == batch.batch_id
        assert profile.profile_completed is True
        assert profile.profile_completed_at is not None

        assert result.access_token
        payload = AuthService().decode_access_token(result.access_token)
        assert payload["sub"] == str(result.user.user_id)

        logs = await db_session.execute(
            select(ActivityLog.action).where(ActivityLog.user_id == result.user.user_id)
        )
        assert set(logs.scalars().all()) == {"user_registered_via_survey", "survey_completed"}

    @pytest.mark.asyncio
    async def test_no_batch_is_created_for_unknown_year(self, db_session, survey_factory):
        service, _, token = await self._answer_registration_survey(
            db_session, survey_factory, {"First Name": "Ben", "Graduation Year": 1899}
        )

        result = await service.complete_response(token, email=email_for("ben"), password="secret123")

        profile = await RegistrationService(db_session).get_profile(result.user.user_id)
        assert profile.graduation_year == 1899
        assert profile.batch_id is None
        batches = await db_session.execute(select(Batch).where(Batch.graduation_year == 1899))
        assert batches.scalars().all() == []

    @pytest.mark.asyncio
    async def test_existing_email_is_rejected_and_session_stays_open(
        self, db_session, survey_factory, user_factory
    ):
        existing = await user_factory(email=email_for("taken"))
        taken_email = existing.email
        service, _, token = await self._answer_registration_survey(
            db_session, survey_factory, {"First Name": "Cara"}
        )

        with pytest.raises(EmailAlreadyExists):
            await service.complete_response(token, email=taken_email, password="secret123")

        response = await service.get_response(token)
        assert response.status == "in_progress"
        assert response.completed_at is None

    @pytest.mark.asyncio
    async def test_short_password_is_rejected(self, db_session, survey_factory):
        service, _, token = await self._answer_registration_survey(
            db_session, survey_factory, {"First Name": "Dan"}
        )
        email = email_for("dan")

        with pytest.raises(PasswordValidationError):
            await service.complete_response(token, email=email, password="123")

        users = await db_session.execute(select(User).where(User.email == email))
        assert users.scalar_one_or_none() is None

    @pytest.mark.asyncio
    async def test_oversized_gpa_does_not_block_registration(self, db_session, survey_factory):
        survey, (first_name, gpa) = await survey_factory(
            questions=[
                {"question_text": "First Name", "question_type": "text"},
                {"question_text": "GPA", "question_type": "number"},
            ],
            is_registration_survey=True,
        )
        service = SurveyResponseService(db_session)
        token = (await service.start_response(survey.survey_id)).response.response_token
        await service.submit_answer(token, first_name.question_id, "Gia")
        await service.submit_answer(token, gpa.question_id, "100")

        result = await service.complete_response(token, email=email_for("gia"), password="secret123")

        profile = await RegistrationService(db_session).get_profile(result.user.user_id)
        assert profile.first_name == "Gia"
        assert profile.gpa is None
        assert result.response.status == "completed"

    @pytest.mark.asyncio
    async def test_registration_needs_both_credentials(self, db_session, survey_factory):
        service, _, token = await self._answer_registration_survey(
            db_session, survey_factory, {"First Name": "Eve"}
        )

        result = await service.complete_response(token, email=email_for("eve"))

        assert result.user is None
        assert result.response.status == "completed"
