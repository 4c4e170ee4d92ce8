from typing import Any, Dict

from flask import request

from dropstream.errors import ValidationError


def json_body() -> Dict[str, Any]:
    """
    The request's JSON object. A missing body counts as `{}`; anything that
    is not an object is rejected.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")
    return data


def int_arg(name: str, default: int, *, minimum: int = 1, maximum: int = 100) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    return max(minimum, min(value, maximum))
