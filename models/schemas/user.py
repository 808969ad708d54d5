from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError, EXCLUDE

MIN_PASSWORD_LENGTH = 8


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _norm_username(v):
    return v.strip().lower() if isinstance(v, str) else v


def _check_password_length(value):
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(max=64))
    email = fields.Email(required=True, validate=validate.Length(max=255))
    full_name = fields.String(required=True, data_key="fullName", validate=validate.Length(max=255))
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        if "username" in data:
            data["username"] = _norm_username(data["username"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        _check_password_length(value)


class UserLoginSchema(Schema):
    """Either username or email identifies the account."""
    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(required=True, load_only=True)


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(allow_none=True, data_key="fullName", validate=validate.Length(max=255))
    email = fields.Email(allow_none=True, validate=validate.Length(max=255))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class PasswordChangeSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(required=True, load_only=True, data_key="oldPassword")
    new_password = fields.String(required=True, load_only=True, data_key="newPassword")

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        _check_password_length(value)


class UserOutSchema(Schema):
    """Public view of a user: no password hash, no refresh token."""
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
