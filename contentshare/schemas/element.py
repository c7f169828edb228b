from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from ..models.content_element import ContentElement

class ElementCreateSchema(Schema):
    element_type = fields.Str(required=True, validate=validate.OneOf(ContentElement.VALID_TYPES))
    data = fields.Raw(required=True, allow_none=False)
    position = fields.Int(required=False, allow_none=True, validate=validate.Range(min=1))

class ElementsCreateSchema(Schema):
    elements = fields.List(fields.Nested(ElementCreateSchema), required=True, validate=validate.Length(min=1))

    @validates_schema
    def distinct_positions(self, data, **kwargs):
        explicit = [e["position"] for e in data.get("elements", []) if e.get("position") is not None]
        if len(explicit) != len(set(explicit)):
            raise ValidationError("Element positions must be distinct", field_name="elements")

class ElementUpdateSchema(Schema):
    data = fields.Raw(required=False, allow_none=False)
    position = fields.Int(required=False, validate=validate.Range(min=1))

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")

class ElementReadSchema(Schema):
    id = fields.UUID()
    content_id = fields.UUID()
    element_type = fields.Str()
    data = fields.Raw()
    position = fields.Int()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
