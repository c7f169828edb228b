from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from ..models.user import Role

class UserSchema(Schema):
    id = fields.UUID()
    username = fields.Str()
    email = fields.Email()
    role = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

class UserUpdateSchema(Schema):
    username = fields.Str(required=False, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=False)
    password = fields.Str(required=False, validate=validate.Length(min=6, max=128))

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")

class RoleUpdateSchema(Schema):
    role = fields.Str(required=True, validate=validate.OneOf([Role.REGISTERED.value, Role.ADMIN.value]))
