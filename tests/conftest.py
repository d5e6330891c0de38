"""Pytest configuration and fixtures."""
import os
import uuid
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"

from alumni_tracer.config import get_settings


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(BASE_DIR / "alumni_tracer" / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows, database might still be in use
            pass


@pytest.fixture
async def test_engine():
    """Create test database engine using the same database as migrations."""
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
async def test_app(session_factory):
    """Create test app with database override."""
    from alumni_tracer.main import app
    from alumni_tracer.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


def unique_email(prefix: str = "alumni") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


@pytest.fixture
def survey_factory(db_session):
    """Factory for active surveys with questions.

    ``questions`` is a list of keyword dicts for :class:`SurveyQuestion`;
    ``order`` defaults to the list position and ``question_text`` to a
    generated label.
    """
    from alumni_tracer.models.survey import Survey
    from alumni_tracer.models.survey_question import SurveyQuestion

    async def _create_survey(questions=(), **overrides):
        fields = {"title": f"Tracer {uuid.uuid4().hex[:6]}", "status": "active"}
        fields.update(overrides)
        survey = Survey(**fields)
        db_session.add(survey)
        await db_session.flush()

        created = []
        for index, question_fields in enumerate(questions):
            question_fields = dict(question_fields)
            question_fields.setdefault("order", index)
            question_fields.setdefault("question_text", f"Question {index + 1}")
            question = SurveyQuestion(survey_id=survey.survey_id, **question_fields)
            db_session.add(question)
            created.append(question)

        await db_session.commit()
        return survey, created

    return _create_survey


@pytest.fixture
def user_factory(db_session):
    """Factory for committed alumni accounts."""
    from alumni_tracer.services.user_service import UserService

    async def _create_user(email: str | None = None, password: str = "secret123"):
        user = await UserService(db_session).create_user(email or unique_email(), password)
        await db_session.commit()
        return user

    return _create_user


@pytest.fixture
def auth_headers():
    """Bearer Authorization header for a user."""
    from alumni_tracer.services.auth_service import AuthService

    def _headers(user):
        token, _ = AuthService().create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers
