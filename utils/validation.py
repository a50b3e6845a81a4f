from datetime import datetime, timezone

from utils.errors import ValidationError


def require_text(value, field, max_length=None):
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{field} is required")
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def require_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(f"Invalid {field}: {value!r}")
    return value


def parse_datetime(value, field):
    """Accept a datetime or an ISO 8601 string; return naive UTC."""
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"{field} must be an ISO 8601 date/time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
