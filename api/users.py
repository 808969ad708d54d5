"""
Profile endpoints for the signed-in user:
- GET   /users/me
- PATCH /users/me               (JSON: fullName, email)
- PATCH /users/me/avatar        (multipart: avatar)
- PATCH /users/me/cover-image   (multipart: coverImage)
- POST  /users/me/password      (JSON: oldPassword, newPassword)
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import UserUpdateSchema, PasswordChangeSchema
from utils.decorators import jwt_required

from .cookies import clear_session_cookies

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
password_change_schema = PasswordChangeSchema()


def _controller():
    return current_app.extensions["session_controller"]


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user info
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    user = _controller().get_current_user(g.current_user.id)
    return jsonify({"data": user, "message": "Current user fetched"}), 200


@bp.patch("/users/me")
@jwt_required()
def update_me():
    """
    Update full name and/or email
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullName: { type: string }
             email: { type: string }
    responses:
      200: { description: Updated }
      400: { description: Validation error }
      409: { description: Email already registered }
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)
    user = _controller().update_profile(
        g.current_user.id,
        full_name=data.get("full_name"),
        email=data.get("email"),
    )
    return jsonify({"data": user, "message": "Account details updated"}), 200


@bp.patch("/users/me/avatar")
@jwt_required()
def update_avatar():
    """
    Replace the avatar image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: avatar, type: file, required: true }
    responses:
      200: { description: Updated }
      400: { description: Missing file }
      502: { description: Media upload failed }
    """
    user = _controller().update_avatar(g.current_user.id, request.files.get("avatar"))
    return jsonify({"data": user, "message": "Avatar updated"}), 200


@bp.patch("/users/me/cover-image")
@jwt_required()
def update_cover_image():
    """
    Replace the cover image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: coverImage, type: file, required: true }
    responses:
      200: { description: Updated }
      400: { description: Missing file }
      502: { description: Media upload failed }
    """
    user = _controller().update_cover_image(g.current_user.id, request.files.get("coverImage"))
    return jsonify({"data": user, "message": "Cover image updated"}), 200


@bp.post("/users/me/password")
@jwt_required()
def change_password():
    """
    Change password; signs out every session
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200: { description: Password changed }
      400: { description: Validation error }
      401: { description: Old password is wrong }
    """
    payload = request.get_json(silent=True) or {}
    data = password_change_schema.load(payload)
    _controller().change_password(g.current_user.id, data["old_password"], data["new_password"])
    resp = jsonify({"data": {}, "message": "Password changed successfully"})
    return clear_session_cookies(resp), 200
