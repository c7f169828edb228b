from marshmallow import Schema, fields, validate

class ResponseItemSchema(Schema):
    element_id = fields.UUID(required=True)
    answer = fields.Raw(required=False, allow_none=True)

class SubmitResponseSchema(Schema):
    # Required for guests; checked in the view since it depends on the caller
    guest_name = fields.Str(data_key="guestName", required=False, allow_none=True, validate=validate.Length(max=100))
    responses = fields.List(fields.Nested(ResponseItemSchema), required=True, validate=validate.Length(min=1))
    completed = fields.Bool(required=False, load_default=True)
