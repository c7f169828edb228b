from datetime import timezone
from marshmallow import Schema, fields, validate, validates_schema, post_load, ValidationError


def _naive_utc(value):
    # Stored as naive UTC, like every other timestamp
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class LinkCreateSchema(Schema):
    expiration_date = fields.DateTime(data_key="expirationDate", required=False, allow_none=True)
    max_access = fields.Int(data_key="maxAccess", required=False, allow_none=True, validate=validate.Range(min=1))
    secret_code = fields.Str(data_key="secretCode", required=False, allow_none=True, validate=validate.Length(min=1, max=64))

    @post_load
    def normalize(self, data, **kwargs):
        if "expiration_date" in data:
            data["expiration_date"] = _naive_utc(data["expiration_date"])
        return data

class LinkUpdateSchema(Schema):
    # An explicit null clears the limit; an absent field leaves it untouched
    expiration_date = fields.DateTime(data_key="expirationDate", required=False, allow_none=True)
    max_access = fields.Int(data_key="maxAccess", required=False, allow_none=True, validate=validate.Range(min=1))

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")

    @post_load
    def normalize(self, data, **kwargs):
        if "expiration_date" in data:
            data["expiration_date"] = _naive_utc(data["expiration_date"])
        return data

class LinkReadSchema(Schema):
    id = fields.UUID()
    content_id = fields.UUID(allow_none=True)
    link = fields.Str(attribute="token")
    expiration_date = fields.DateTime(allow_none=True)
    max_access = fields.Int(allow_none=True)
    access_count = fields.Int()
    created_at = fields.DateTime()
