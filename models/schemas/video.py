from marshmallow import Schema, fields, validate, EXCLUDE

from models.schemas.user import UserOutSchema


class VideoCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=True, validate=validate.Length(min=1))
    duration = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False))
    is_published = fields.Boolean(load_default=True, data_key="isPublished")


class VideoOutSchema(Schema):
    id = fields.String()
    video_file = fields.String(data_key="videoFile")
    thumbnail = fields.String()
    title = fields.String()
    description = fields.String()
    duration = fields.Float()
    views = fields.Integer()
    is_published = fields.Boolean(data_key="isPublished")
    owner = fields.Nested(UserOutSchema, only=("id", "username", "full_name", "avatar"))
    created_at = fields.DateTime(data_key="createdAt")
