"""Base schemas with common configuration."""
from datetime import datetime, UTC
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_serializer


def serialize_datetime_utc(dt: datetime) -> str:
    """Serialize datetime to ISO 8601 with a ``Z`` suffix.

    SQLite stores datetimes as naive strings, so we treat them as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace('+00:00', 'Z')


def serialize_decimal(value: Decimal) -> int | float:
    """Whole numbers stay integers; everything else becomes a float."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


class BaseSchema(BaseModel):
    """Base schema with common configuration for all API responses."""

    model_config = ConfigDict(
        from_attributes=True,
    )

    @model_serializer(mode="wrap")
    def serialize_model(self, handler):
        """Serialize model values with custom datetime and decimal handling."""

        def _convert(value):
            if isinstance(value, datetime):
                return serialize_datetime_utc(value)
            if isinstance(value, Decimal):
                return serialize_decimal(value)
            if isinstance(value, list):
                return [_convert(item) for item in value]
            if isinstance(value, dict):
                return {key: _convert(item) for key, item in value.items()}
            return value

        data = handler(self)
        return {key: _convert(value) for key, value in data.items()}
