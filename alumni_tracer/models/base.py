"""Base utilities for SQLAlchemy models."""
from enum import Enum
import uuid
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.sql import sqltypes


class QuestionType(str, Enum):
    """Question type enumeration for type safety."""
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    RATING = "rating"
    MATRIX = "matrix"
    FILE_UPLOAD = "file_upload"
    BOOLEAN = "boolean"


class SurveyStatus(str, Enum):
    """Survey publication status."""
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class ResponseStatus(str, Enum):
    """Response session status.

    ABANDONED is only ever assigned by an external sweep job.
    """
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class InvitationStatus(str, Enum):
    """Survey invitation delivery/engagement status."""
    PENDING = "pending"
    SENT = "sent"
    OPENED = "opened"
    CLICKED = "clicked"
    RESPONDED = "responded"


class UserRole(str, Enum):
    ADMIN = "admin"
    ALUMNI = "alumni"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class EmploymentStatus(str, Enum):
    """Controlled vocabulary for alumni employment status."""
    EMPLOYED_FULL_TIME = "employed_full_time"
    EMPLOYED_PART_TIME = "employed_part_time"
    SELF_EMPLOYED = "self_employed"
    UNEMPLOYED_SEEKING = "unemployed_seeking"
    UNEMPLOYED_NOT_SEEKING = "unemployed_not_seeking"
    CONTINUING_EDUCATION = "continuing_education"
    MILITARY_SERVICE = "military_service"
    OTHER = "other"


class EntityKind(str, Enum):
    """Entity kinds an activity log entry may reference."""
    SURVEY = "survey"
    SURVEY_RESPONSE = "survey_response"
    USER = "user"
    ALUMNI_PROFILE = "alumni_profile"


class AdaptiveUUID(sqltypes.TypeDecorator):
    """UUID stored natively on PostgreSQL and as hex text elsewhere."""

    impl = sqltypes.String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    @staticmethod
    def _coerce_uuid(value):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_bind_param(self, value, dialect):
        value = self._coerce_uuid(value)
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return value.hex

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._coerce_uuid(value)


def get_uuid_column(*args, **kwargs):
    """Get a UUID column that adapts to the database dialect at runtime.

    Example:
        survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
        user_id = get_uuid_column(ForeignKey("users.user_id"), nullable=True)
    """
    return Column(AdaptiveUUID(), *args, **kwargs)
