from flask import request
from marshmallow import ValidationError as SchemaValidationError

from ..errors import ValidationError

def validate_or_abort(schema, payload=None):
    """Load ``payload`` (default: the JSON body) through ``schema``; 400 with field errors on failure."""
    if payload is None:
        payload = request.get_json(silent=True) or {}
    try:
        return schema.load(payload)
    except SchemaValidationError as e:
        raise ValidationError(details=e.messages)


def query_int(name: str, default: int, minimum: int = 1, maximum: int | None = None) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name}", details={name: ["Must be an integer"]})
    if value < minimum:
        raise ValidationError(f"Invalid {name}", details={name: [f"Must be at least {minimum}"]})
    if maximum is not None:
        value = min(value, maximum)
    return value
