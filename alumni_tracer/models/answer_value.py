"""Typed answer payloads.

An answer row carries one nullable column per payload kind. Which column is
meaningful is never stored on the row: it is derived from the owning
question's type every time the row is written or read. The classes below are
the in-memory form of that tagged union, and the functions translate between
raw request input, the value objects, and the column layout.

Parsing is lenient on purpose. Input that cannot be interpreted for the
question's type (``"abc"`` for a number, ``"31/02"`` for a date) produces
:class:`EmptyValue` rather than an error.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Union

from alumni_tracer.models.base import QuestionType

# answer_number is Numeric(15, 4)
NUMBER_PRECISION = 15
NUMBER_SCALE = 4
NUMBER_INTEGER_DIGITS = NUMBER_PRECISION - NUMBER_SCALE

PAYLOAD_COLUMNS = (
    "answer_text",
    "answer_json",
    "answer_number",
    "answer_date",
    "answer_boolean",
    "file_path",
    "file_name",
    "file_type",
    "file_size",
)

NUMERIC_TYPES = frozenset({QuestionType.NUMBER, QuestionType.RATING})
LIST_TYPES = frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX, QuestionType.MATRIX})

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "n", "off"})


@dataclass(frozen=True)
class TextValue:
    text: str

    def to_columns(self) -> dict[str, Any]:
        return {"answer_text": self.text}

    def formatted(self) -> str:
        return self.text


@dataclass(frozen=True)
class NumberValue:
    number: Decimal
    integral: bool = False

    def to_columns(self) -> dict[str, Any]:
        return {"answer_number": self.number}

    def formatted(self) -> Decimal | int:
        if self.integral:
            return int(self.number)
        return self.number


@dataclass(frozen=True)
class ChoiceValue:
    """Ordered selections, or a row -> column mapping for matrix questions."""

    items: list[Any] | dict[str, Any]

    def to_columns(self) -> dict[str, Any]:
        return {"answer_json": self.items}

    def formatted(self) -> list[Any] | dict[str, Any]:
        return self.items


@dataclass(frozen=True)
class DateValue:
    value: date

    def to_columns(self) -> dict[str, Any]:
        return {"answer_date": self.value}

    def formatted(self) -> str:
        return self.value.strftime("%Y-%m-%d")


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    def to_columns(self) -> dict[str, Any]:
        return {"answer_boolean": self.value}

    def formatted(self) -> bool:
        return self.value


@dataclass(frozen=True)
class FileMeta:
    file_name: str | None
    file_path: str | None
    file_type: str | None
    file_size: int | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "file_type": self.file_type,
        }


@dataclass(frozen=True)
class FileValue:
    meta: FileMeta

    def to_columns(self) -> dict[str, Any]:
        return {
            "file_name": self.meta.file_name,
            "file_path": self.meta.file_path,
            "file_type": self.meta.file_type,
            "file_size": self.meta.file_size,
        }

    def formatted(self) -> dict[str, Any]:
        return self.meta.as_dict()


@dataclass(frozen=True)
class EmptyValue:

    def to_columns(self) -> dict[str, Any]:
        return {}

    def formatted(self) -> None:
        return None


AnswerValue = Union[TextValue, NumberValue, ChoiceValue, DateValue, BooleanValue, FileValue, EmptyValue]

EMPTY = EmptyValue()


def normalize_question_type(question_type: QuestionType | str | None) -> QuestionType | None:
    """Map a stored type string onto the enum; unknown strings become None."""
    if isinstance(question_type, QuestionType):
        return question_type
    try:
        return QuestionType(question_type)
    except ValueError:
        return None


def is_blank(raw: Any) -> bool:
    """Whether raw input counts as "no answer given".

    Zero and ``False`` are real answers; only missing values, whitespace-only
    strings and empty collections are blank.
    """
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, (list, tuple, set, dict)):
        return len(raw) == 0
    return False


def parse_decimal(raw: Any, max_integer_digits: int = NUMBER_INTEGER_DIGITS) -> Decimal | None:
    """Lenient Decimal parsing; None for non-numbers and for magnitudes of
    ``max_integer_digits`` or more digits before the point.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, Decimal):
        number = raw
    elif isinstance(raw, (int, float)):
        number = Decimal(str(raw))
    elif isinstance(raw, str):
        try:
            number = Decimal(raw.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    if number.is_zero():
        return Decimal(0)
    if number.adjusted() >= max_integer_digits:
        return None
    return number


def fit_numeric(number: Decimal | None, precision: int, scale: int) -> Decimal | None:
    """Round ``number`` for a ``Numeric(precision, scale)`` column; None when it does not fit.

    >>> fit_numeric(Decimal("3.756"), 4, 2)
    Decimal('3.76')
    >>> fit_numeric(Decimal("100"), 4, 2) is None
    True
    """
    if number is None:
        return None
    if number.is_zero():
        return Decimal(0).quantize(Decimal(1).scaleb(-scale))
    integer_digits = precision - scale
    if number.adjusted() >= integer_digits:
        return None
    rounded = number.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
    if rounded.adjusted() >= integer_digits:
        return None
    return rounded


def parse_date(raw: Any) -> date | None:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _parse_bool(raw: Any) -> bool | None:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _parse_file(raw: Any) -> FileMeta | None:
    if not isinstance(raw, Mapping):
        return None
    size = raw.get("file_size")
    try:
        size = int(size) if size is not None else None
    except (TypeError, ValueError):
        size = None
    meta = FileMeta(
        file_name=raw.get("file_name"),
        file_path=raw.get("file_path"),
        file_type=raw.get("file_type"),
        file_size=size,
    )
    if meta.file_name is None and meta.file_path is None:
        return None
    return meta


def _as_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (list, tuple, dict)):
        return json.dumps(raw, default=str)
    return str(raw)


def coerce_answer_value(raw: Any, question_type: QuestionType | str | None) -> AnswerValue:
    """Interpret raw input according to the question type."""
    if raw is None:
        return EMPTY

    qtype = normalize_question_type(question_type)

    if qtype == QuestionType.NUMBER:
        number = fit_numeric(parse_decimal(raw), NUMBER_PRECISION, NUMBER_SCALE)
        return NumberValue(number) if number is not None else EMPTY

    if qtype == QuestionType.RATING:
        number = fit_numeric(parse_decimal(raw), NUMBER_PRECISION, NUMBER_SCALE)
        if number is None:
            return EMPTY
        return NumberValue(Decimal(int(number)), integral=True)

    if qtype == QuestionType.DATE:
        parsed = parse_date(raw)
        return DateValue(parsed) if parsed is not None else EMPTY

    if qtype in LIST_TYPES:
        if qtype == QuestionType.MATRIX and isinstance(raw, Mapping):
            return ChoiceValue(dict(raw))
        if isinstance(raw, (list, tuple)):
            return ChoiceValue(list(raw))
        return ChoiceValue([raw])

    if qtype == QuestionType.FILE_UPLOAD:
        meta = _parse_file(raw)
        return FileValue(meta) if meta is not None else EMPTY

    if qtype == QuestionType.BOOLEAN:
        flag = _parse_bool(raw)
        return BooleanValue(flag) if flag is not None else EMPTY

    # Text-like types and anything unrecognized
    return TextValue(_as_text(raw))


def payload_columns(value: AnswerValue) -> dict[str, Any]:
    """Full payload column mapping: the value's slots set, every other slot cleared."""
    columns = dict.fromkeys(PAYLOAD_COLUMNS)
    columns.update(value.to_columns())
    return columns


def read_answer_value(row: Any, question_type: QuestionType | str | None) -> AnswerValue:
    """Rebuild the typed value from a row's payload columns."""
    qtype = normalize_question_type(question_type)

    if qtype in NUMERIC_TYPES:
        if row.answer_number is None:
            return EMPTY
        return NumberValue(Decimal(row.answer_number), integral=qtype == QuestionType.RATING)

    if qtype == QuestionType.DATE:
        return DateValue(parse_date(row.answer_date)) if row.answer_date is not None else EMPTY

    if qtype in LIST_TYPES:
        return ChoiceValue(row.answer_json) if row.answer_json is not None else EMPTY

    if qtype == QuestionType.FILE_UPLOAD:
        if row.file_name is None and row.file_path is None:
            return EMPTY
        return FileValue(FileMeta(row.file_name, row.file_path, row.file_type, row.file_size))

    if qtype == QuestionType.BOOLEAN:
        return BooleanValue(bool(row.answer_boolean)) if row.answer_boolean is not None else EMPTY

    return TextValue(row.answer_text) if row.answer_text is not None else EMPTY
