# Input checks shared by the workflow operations

from typing import Optional
from urllib.parse import urlparse

from workflow.errors import ValidationError

WEB_SCHEMES = ("http", "https")


def validate_amount(amount, field: str = "amount") -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError(f"{field} must be a positive whole number, got {amount!r}")
    return amount


def validate_uri(value: Optional[str], field: str, schemes: Optional[tuple] = None) -> str:
    """Object storage URIs (s3://, gs://, https://...) or, with schemes, public links only."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(f"{field} must be an absolute URI, got '{value}'")
    if schemes and parsed.scheme.lower() not in schemes:
        raise ValidationError(f"{field} must use one of: {', '.join(schemes)}")
    return value


def validate_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
