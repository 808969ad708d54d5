"""
Session endpoints:
- POST /users/register       (multipart: username, email, fullName, password, avatar, coverImage)
- POST /users/login          (JSON: username or email, password)
- POST /users/refresh-token  (refreshToken cookie or JSON body)
- POST /users/logout         (authenticated)

Tokens are returned in the body and also set as http-only cookies
(accessToken / refreshToken) whose max-age matches the token lifetime.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserRegisterSchema, UserLoginSchema
from utils.decorators import jwt_required

from .cookies import set_session_cookies, clear_session_cookies, read_refresh_token

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()


def _controller():
    return current_app.extensions["session_controller"]


@bp.post("/users/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: fullName, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      409:
        description: Username or email already registered
      502:
        description: Media upload failed
    """
    data = user_register_schema.load(request.form.to_dict())
    user = _controller().register(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        full_name=data["full_name"],
        avatar=request.files.get("avatar"),
        cover_image=request.files.get("coverImage"),
    )
    return jsonify({"data": user, "message": "User registered successfully"}), 201


@bp.post("/users/login")
def login():
    """
    Login: returns access and refresh tokens and sets them as cookies
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing identifier or password
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    session = _controller().login(
        password=data["password"],
        username=data.get("username"),
        email=data.get("email"),
    )
    resp = jsonify(
        {
            "data": {
                "user": session.user,
                "accessToken": session.access_token,
                "refreshToken": session.refresh_token,
            },
            "message": "User logged in successfully",
        }
    )
    return set_session_cookies(resp, session.access_token, session.refresh_token), 200


@bp.post("/users/refresh-token")
def refresh():
    """
    Exchange the refresh token for a new access/refresh pair (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New tokens
      401:
        description: Missing, expired, revoked or superseded refresh token
    """
    session = _controller().refresh(read_refresh_token(request))
    resp = jsonify(
        {
            "data": {
                "accessToken": session.access_token,
                "refreshToken": session.refresh_token,
            },
            "message": "Access token refreshed",
        }
    )
    return set_session_cookies(resp, session.access_token, session.refresh_token), 200


@bp.post("/users/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the stored refresh token and clears both cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    _controller().logout(g.current_user.id)
    resp = jsonify({"data": {}, "message": "User logged out"})
    return clear_session_cookies(resp), 200
