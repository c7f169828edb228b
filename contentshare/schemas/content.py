from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from ..models.content import Content

class ContentCreateSchema(Schema):
    title = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    type = fields.Str(required=True, validate=validate.OneOf(Content.VALID_TYPES))
    description = fields.Str(required=False, allow_none=True, validate=validate.Length(max=5000))
    settings = fields.Dict(required=False, load_default=dict)
    is_public = fields.Bool(required=False, load_default=False)

class ContentUpdateSchema(Schema):
    title = fields.Str(required=False, validate=validate.Length(min=1, max=255))
    type = fields.Str(required=False, validate=validate.OneOf(Content.VALID_TYPES))
    description = fields.Str(required=False, allow_none=True, validate=validate.Length(max=5000))
    settings = fields.Dict(required=False)
    is_public = fields.Bool(required=False)

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")

class ContentReadSchema(Schema):
    id = fields.UUID()
    owner_id = fields.UUID(allow_none=True)
    title = fields.Str()
    type = fields.Str()
    description = fields.Str(allow_none=True)
    settings = fields.Dict()
    is_public = fields.Bool()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
