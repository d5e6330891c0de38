"""Survey answer model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Any, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)

from alumni_tracer.database import Base
from alumni_tracer.models.answer_value import (
    LIST_TYPES,
    NUMBER_PRECISION,
    NUMBER_SCALE,
    PAYLOAD_COLUMNS,
    AnswerValue,
    EmptyValue,
    coerce_answer_value,
    normalize_question_type,
    payload_columns,
    read_answer_value,
)
from alumni_tracer.models.base import get_uuid_column

if TYPE_CHECKING:
    from alumni_tracer.models.survey_question import SurveyQuestion


class SurveyAnswer(Base):
    """The value a respondent gave for one question within one response.

    Only one group of payload columns is populated at a time. The owning
    question's type says which one; readers always re-derive it through
    :meth:`value` rather than inspecting columns directly.
    """

    __tablename__ = "survey_answers"

    answer_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    response_id = get_uuid_column(
        ForeignKey("survey_responses.response_id", ondelete="CASCADE"), nullable=False
    )
    question_id = get_uuid_column(
        ForeignKey("survey_questions.question_id", ondelete="RESTRICT"), nullable=False
    )

    answer_text = Column(Text, nullable=True)
    answer_json = Column(JSON(none_as_null=True), nullable=True)
    answer_number = Column(Numeric(NUMBER_PRECISION, NUMBER_SCALE), nullable=True)
    answer_date = Column(Date, nullable=True)
    answer_boolean = Column(Boolean, nullable=True)

    file_path = Column(String(500), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)

    answered_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    is_skipped = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_survey_answers_response_question"),
        Index("ix_survey_answers_question_id", "question_id"),
        Index("ix_survey_answers_answered_at", "answered_at"),
    )

    def clear_value(self) -> None:
        for column in PAYLOAD_COLUMNS:
            setattr(self, column, None)

    def set_value(self, raw: Any, question: "SurveyQuestion") -> AnswerValue:
        """Store ``raw`` in the slot matching the question type.

        Every payload slot is cleared first. Input the type cannot interpret
        leaves the answer without a value and does not touch ``is_skipped``.
        """
        value = coerce_answer_value(raw, question.question_type)
        for column, column_value in payload_columns(value).items():
            setattr(self, column, column_value)
        if not isinstance(value, EmptyValue):
            self.is_skipped = False
        return value

    def value(self, question: "SurveyQuestion") -> AnswerValue:
        return read_answer_value(self, question.question_type)

    def get_formatted_value(self, question: "SurveyQuestion") -> Any:
        """Answer shaped for the question type; list types read as ``[]`` when unset."""
        value = self.value(question)
        if isinstance(value, EmptyValue):
            if normalize_question_type(question.question_type) in LIST_TYPES:
                return []
            return None
        return value.formatted()

    def has_value(self) -> bool:
        return any(getattr(self, column) is not None for column in PAYLOAD_COLUMNS)

    def __repr__(self) -> str:
        return (f"<SurveyAnswer(answer_id={self.answer_id}, response_id={self.response_id}, "
                f"question_id={self.question_id}, skipped={self.is_skipped})>")
