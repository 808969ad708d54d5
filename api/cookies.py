"""Session cookie helpers: both tokens travel as http-only cookies."""
from flask import current_app

from utils.decorators import ACCESS_COOKIE

REFRESH_COOKIE = "refreshToken"


def _settings():
    return current_app.extensions["auth_settings"]


def set_session_cookies(resp, access_token: str, refresh_token: str):
    settings = _settings()
    for key, value, ttl in (
        (ACCESS_COOKIE, access_token, settings.access_token_ttl),
        (REFRESH_COOKIE, refresh_token, settings.refresh_token_ttl),
    ):
        resp.set_cookie(
            key,
            value,
            max_age=int(ttl.total_seconds()),
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
            path="/",
        )
    return resp


def clear_session_cookies(resp):
    settings = _settings()
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        resp.delete_cookie(
            key,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )
    return resp


def read_refresh_token(request):
    """Cookie first, then the JSON body."""
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        payload = request.get_json(silent=True)
        token = payload.get("refreshToken") if isinstance(payload, dict) else None
    return token.strip() if isinstance(token, str) else None
