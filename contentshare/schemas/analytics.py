from marshmallow import Schema, fields

class ContentStatsSchema(Schema):
    content_id = fields.Str(required=True)
    total_participants = fields.Int(required=True)
    completion_rate = fields.Float(allow_none=True)
    average_score = fields.Float(required=True)

class ContentTypeCountSchema(Schema):
    type = fields.Str(required=True)
    count = fields.Int(required=True)

class DashboardOverviewSchema(Schema):
    total_content = fields.Int(required=True)
    content_type_breakdown = fields.List(fields.Nested(ContentTypeCountSchema), required=True)
    total_participants = fields.Int(required=True)
    completion_rate = fields.Float(allow_none=True)
    average_score = fields.Float(required=True)
