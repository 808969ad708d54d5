from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from services.exceptions import UnauthorizedError
from utils.pipeline import Pipeline, RequestContext

ACCESS_COOKIE = "accessToken"


def extract_access_token(ctx: RequestContext):
    """Cookie first, then the Authorization: Bearer header."""
    token = ctx.request.cookies.get(ACCESS_COOKIE)
    if not token:
        auth = ctx.request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            token = auth.split(" ", 1)[1].strip()
    if not token:
        raise UnauthorizedError("Unauthorized request")
    ctx.token = token


def authenticate_user(ctx: RequestContext):
    controller = current_app.extensions["session_controller"]
    ctx.user = controller.authenticate(ctx.token)


def bind_current_user(ctx: RequestContext):
    g.current_user = ctx.user


auth_pipeline = Pipeline(extract_access_token, authenticate_user, bind_current_user)


def jwt_required(pipeline: Pipeline = auth_pipeline):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            result = pipeline.run(RequestContext(request=request))
            if result is not None:
                return result
            return fn(*args, **kwargs)

        return wrapper

    return decorator
