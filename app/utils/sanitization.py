import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters in user text that ends up inside contract HTML.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(value.strip(), quote=True)


def sanitize_dict(data: dict[str, Any], skip: Optional[set[str]] = None) -> dict[str, Any]:
    """
    Escape every string value in a (possibly nested) dict.

    Args:
        data: Dictionary to sanitize
        skip: Keys whose values are kept as-is (e.g. signature image data URLs)

    Returns:
        New dictionary with sanitized values
    """
    if not data:
        return data

    skip = skip or set()
    sanitized = {}
    for key, value in data.items():
        if key in skip:
            sanitized[key] = value
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, skip)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, skip) if isinstance(item, dict) else sanitize_string(item) for item in value
            ]
        else:
            sanitized[key] = value
    return sanitized


def normalize_email(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().lower()
