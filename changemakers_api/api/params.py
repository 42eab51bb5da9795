from typing import Any

from changemakers_api.core.exceptions import ValidationError


def require(value: Any, name: str) -> str:
    """Return ``value`` as a stripped string, or fail with a 400 when blank."""
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{name} is required", message=f"Missing {name}")
    return text
