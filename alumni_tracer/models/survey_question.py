"""Survey question model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Any

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text

from alumni_tracer.database import Base
from alumni_tracer.models.base import QuestionType, get_uuid_column

CHOICE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE.value,
    QuestionType.MULTIPLE_CHOICE.value,
    QuestionType.DROPDOWN.value,
    QuestionType.CHECKBOX.value,
})
MULTI_ANSWER_TYPES = frozenset({
    QuestionType.MULTIPLE_CHOICE.value,
    QuestionType.CHECKBOX.value,
})


class SurveyQuestion(Base):
    """A single question on a survey.

    Questions are read-only once a survey is published. The ``question_type``
    decides which answer column holds a respondent's value, so it must not
    change after answers exist.
    """

    __tablename__ = "survey_questions"

    question_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    question_text = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    question_type = Column(String(30), nullable=False, default=QuestionType.TEXT.value)

    options = Column(JSON, nullable=True)
    validation_rules = Column(JSON, nullable=True)

    is_required = Column(Boolean, nullable=False, default=False)
    order = Column("order", Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    matrix_rows = Column(JSON, nullable=True)
    matrix_columns = Column(JSON, nullable=True)

    rating_min = Column(Integer, nullable=True)
    rating_max = Column(Integer, nullable=True)
    rating_min_label = Column(String(100), nullable=True)
    rating_max_label = Column(String(100), nullable=True)

    placeholder = Column(String(255), nullable=True)
    help_text = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))

    __table_args__ = (
        Index("ix_survey_questions_survey_order", "survey_id", "order"),
        Index("ix_survey_questions_survey_active", "survey_id", "is_active"),
    )

    def is_choice_type(self) -> bool:
        return self.question_type in CHOICE_TYPES

    def accepts_multiple_answers(self) -> bool:
        return self.question_type in MULTI_ANSWER_TYPES

    @property
    def formatted_options(self) -> list[dict[str, Any]]:
        """Options as ``{value, label}`` pairs for choice questions.

        Plain string options use their position as the value. Mapping options
        keep their own ``value``/``label`` keys when present.
        """
        if not self.is_choice_type() or not self.options:
            return []

        formatted = []
        for index, option in enumerate(self.options):
            if isinstance(option, dict):
                formatted.append({
                    "value": option.get("value", index),
                    "label": option.get("label", option),
                })
            else:
                formatted.append({"value": index, "label": option})
        return formatted

    def __repr__(self) -> str:
        return (f"<SurveyQuestion(question_id={self.question_id}, type={self.question_type}, "
                f"order={self.order})>")
