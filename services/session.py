"""
Session controller: register, login, refresh, logout and profile updates.

Session lifecycle per user: anonymous -> authenticated (login) -> refreshed
any number of times -> revoked (logout). Only the most recently issued
refresh token is accepted; rotating writes use compare-and-set against the
stored value so a superseded token can never be exchanged twice.

Database and crypto library errors never reach callers: they are logged and
re-raised as one of the SessionError subclasses.
"""
from __future__ import annotations

import hmac
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from models.schemas.user import UserOutSchema
from services.credential_store import CredentialStore, DuplicateUserError
from services.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    SessionValidationError,
    UnauthorizedError,
    UpstreamError,
)
from services.media_host import MediaHost, MediaUploadError
from services.tokens import TokenIssuer
from utils.security import (
    TokenExpiredError,
    TokenInvalidError,
    dummy_password_hash,
    hash_password,
    password_needs_rehash,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid user credentials"
REFRESH_REJECTED = "Invalid or expired refresh token"

user_out_schema = UserOutSchema()


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str
    user: Optional[dict] = None


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _has_file(upload) -> bool:
    return upload is not None and bool(getattr(upload, "filename", None))


def sanitize(user) -> dict:
    """Public view of a user record."""
    return user_out_schema.dump(user)


class SessionController:

    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenIssuer,
        media_host: MediaHost,
        distinct_login_errors: bool = False,
    ):
        self.store = store
        self.tokens = tokens
        self.media_host = media_host
        self.distinct_login_errors = distinct_login_errors

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Credential store failure during %s", action)
            raise InternalError("Something went wrong while processing the request") from exc

    def _upload(self, upload, label: str) -> str:
        try:
            asset = self.media_host.upload(upload.stream, upload.filename)
        except MediaUploadError as exc:
            logger.warning("%s upload failed: %s", label, exc)
            raise UpstreamError(f"{label} upload failed") from exc
        return asset.url

    def _issue_pair(self, user_id: str):
        return self.tokens.issue_access_token(user_id), self.tokens.issue_refresh_token(user_id)

    def _require_user(self, user_id: str):
        with self._guard("user lookup"):
            user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User does not exist")
        return user

    def register(self, username, email, password, full_name, avatar, cover_image=None) -> dict:
        """
        Create an account. The avatar is required, the cover image optional;
        both go to the media host before the user row is written.
        """
        username = _clean(username).lower()
        email = _clean(email).lower()
        full_name = _clean(full_name)
        if not all([username, email, full_name, _clean(password)]):
            raise SessionValidationError("All fields are required")
        if not _has_file(avatar):
            raise SessionValidationError("Avatar file is required")

        with self._guard("registration"):
            if self.store.exists(username=username, email=email):
                raise ConflictError("User with email or username already exists")

        avatar_url = self._upload(avatar, "Avatar")
        cover_url = self._upload(cover_image, "Cover image") if _has_file(cover_image) else ""

        with self._guard("registration"):
            try:
                user = self.store.create(
                    username=username,
                    email=email,
                    full_name=full_name,
                    avatar=avatar_url,
                    cover_image=cover_url,
                    password_hash=hash_password(password),
                    refresh_token=None,
                )
            except DuplicateUserError as exc:
                raise ConflictError("User with email or username already exists") from exc

        logger.info("Registered user %s", user.id)
        return sanitize(user)

    def login(self, password, username=None, email=None) -> SessionTokens:
        """Either identifier is enough. Rotates out any earlier refresh token."""
        username = _clean(username).lower()
        email = _clean(email).lower()
        if not username and not email:
            raise SessionValidationError("username or email is required")
        if not password:
            raise SessionValidationError("password is required")

        with self._guard("login"):
            matches = self.store.find_by_username_or_email(username or None, email or None)

        if len(matches) != 1:
            # Keep the unknown-user path as slow as a real password check
            verify_password(password, dummy_password_hash())
            logger.info("Login failed: identifier matched %d users", len(matches))
            if self.distinct_login_errors:
                raise NotFoundError("User does not exist")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user = matches[0]
        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        access_token, refresh_token = self._issue_pair(user.id)
        with self._guard("login"):
            if password_needs_rehash(user.password_hash):
                self.store.update_fields(user.id, password_hash=hash_password(password))
            self.store.update_refresh_token(user.id, refresh_token)

        logger.info("User %s logged in", user.id)
        return SessionTokens(access_token, refresh_token, sanitize(user))

    def refresh(self, presented_token) -> SessionTokens:
        """
        Exchange the current refresh token for a new pair. Every rejection
        looks the same to the caller; the log records the actual cause.
        """
        token = _clean(presented_token)
        if not token:
            logger.info("Refresh rejected: no token presented")
            raise UnauthorizedError(REFRESH_REJECTED)

        try:
            claims = self.tokens.verify_refresh_token(token)
        except TokenExpiredError:
            logger.info("Refresh rejected: token expired")
            raise UnauthorizedError(REFRESH_REJECTED) from None
        except TokenInvalidError as exc:
            logger.warning("Refresh rejected: %s", exc)
            raise UnauthorizedError(REFRESH_REJECTED) from None

        with self._guard("refresh"):
            user = self.store.find_by_id(claims.user_id)
        if user is None:
            logger.warning("Refresh rejected: subject %s no longer exists", claims.user_id)
            raise UnauthorizedError(REFRESH_REJECTED)

        stored = user.refresh_token or ""
        if not stored or not hmac.compare_digest(stored.encode(), token.encode()):
            logger.warning("Refresh rejected: token for user %s is revoked or superseded", user.id)
            raise UnauthorizedError(REFRESH_REJECTED)

        access_token, refresh_token = self._issue_pair(user.id)
        with self._guard("refresh"):
            swapped = self.store.swap_refresh_token(user.id, token, refresh_token)
        if not swapped:
            logger.warning("Refresh rejected: token for user %s was rotated concurrently", user.id)
            raise UnauthorizedError(REFRESH_REJECTED)

        return SessionTokens(access_token, refresh_token)

    def logout(self, user_id: str) -> None:
        """Revoke the stored refresh token. Safe to call repeatedly."""
        with self._guard("logout"):
            self.store.update_refresh_token(user_id, None)
        logger.info("User %s logged out", user_id)

    def authenticate(self, access_token) -> object:
        """Resolve an access token to its user, or raise UnauthorizedError."""
        token = _clean(access_token)
        if not token:
            raise UnauthorizedError("Unauthorized request")
        try:
            claims = self.tokens.verify_access_token(token)
        except TokenExpiredError:
            raise UnauthorizedError("Access token expired") from None
        except TokenInvalidError:
            raise UnauthorizedError("Invalid access token") from None

        with self._guard("authentication"):
            user = self.store.find_by_id(claims.user_id)
        if user is None:
            raise UnauthorizedError("Invalid access token")
        return user

    def get_current_user(self, user_id: str) -> dict:
        return sanitize(self._require_user(user_id))

    def update_profile(self, user_id: str, full_name=None, email=None) -> dict:
        changes = {}
        if full_name is not None:
            if not _clean(full_name):
                raise SessionValidationError("fullName cannot be empty")
            changes["full_name"] = _clean(full_name)
        if email is not None:
            if not _clean(email):
                raise SessionValidationError("email cannot be empty")
            changes["email"] = _clean(email).lower()
        if not changes:
            raise SessionValidationError("At least one of fullName or email is required")

        self._require_user(user_id)
        with self._guard("profile update"):
            if "email" in changes and self.store.email_taken(changes["email"], exclude_user_id=user_id):
                raise ConflictError("Email already registered")
            try:
                user = self.store.update_fields(user_id, **changes)
            except DuplicateUserError as exc:
                raise ConflictError("Email already registered") from exc
        if user is None:
            raise NotFoundError("User does not exist")
        return sanitize(user)

    def _update_image(self, user_id: str, upload, field: str, label: str) -> dict:
        if not _has_file(upload):
            raise SessionValidationError(f"{label} file is missing")
        self._require_user(user_id)
        url = self._upload(upload, label)
        with self._guard(f"{label.lower()} update"):
            user = self.store.update_fields(user_id, **{field: url})
        if user is None:
            raise NotFoundError("User does not exist")
        return sanitize(user)

    def update_avatar(self, user_id: str, upload) -> dict:
        return self._update_image(user_id, upload, "avatar", "Avatar")

    def update_cover_image(self, user_id: str, upload) -> dict:
        return self._update_image(user_id, upload, "cover_image", "Cover image")

    def change_password(self, user_id: str, old_password, new_password) -> None:
        """Also revokes the refresh token, so every other session has to log in again."""
        if not old_password or not _clean(new_password):
            raise SessionValidationError("oldPassword and newPassword are required")
        user = self._require_user(user_id)
        if not verify_password(old_password, user.password_hash):
            raise UnauthorizedError("Invalid old password")
        with self._guard("password change"):
            self.store.update_fields(user_id, password_hash=hash_password(new_password), refresh_token=None)
        logger.info("User %s changed password", user_id)
