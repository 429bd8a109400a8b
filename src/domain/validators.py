"""Input validation shared by the trip and reservation services."""

from datetime import datetime, timezone

from src.domain.exceptions import InvalidInputError


def require_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    return value.strip()


def optional_text(value, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError(f"{field_name} must be text")
    return value.strip() or None


def require_positive_int(value, field_name: str) -> int:
    # bool is an int subclass; True must not pass as a capacity of 1
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field_name} is required and must be an integer")
    if value <= 0:
        raise InvalidInputError(f"{field_name} must be greater than 0")
    return value


def require_non_negative_int(value, field_name: str) -> int:
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field_name} must be an integer")
    if value < 0:
        raise InvalidInputError(f"{field_name} must not be negative")
    return value


def require_timestamp(value, field_name: str) -> datetime:
    """
    Accepts a datetime or an ISO-8601 string and returns an aware UTC datetime.
    Values without an offset are taken as UTC.
    """
    if isinstance(value, datetime):
        return _to_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    try:
        # fromisoformat() only learned the "Z" suffix in 3.11
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise InvalidInputError(
            f"Invalid {field_name} format. Use ISO format."
        ) from exc
    return _to_utc(parsed)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
