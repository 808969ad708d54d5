"""
Auth settings: built once from the Flask config at startup and handed to the
token issuer. Missing or unsafe values abort app creation.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Optional


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class AuthSettings:
    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl: timedelta
    refresh_token_ttl: timedelta
    algorithm: str = "HS256"
    issuer: Optional[str] = None
    cookie_secure: bool = True
    cookie_samesite: str = "Strict"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "AuthSettings":
        access_secret = (config.get("ACCESS_TOKEN_SECRET") or "").strip()
        refresh_secret = (config.get("REFRESH_TOKEN_SECRET") or "").strip()
        if not access_secret:
            raise ConfigError("ACCESS_TOKEN_SECRET must be set.")
        if not refresh_secret:
            raise ConfigError("REFRESH_TOKEN_SECRET must be set.")
        if access_secret == refresh_secret:
            raise ConfigError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ.")

        try:
            access_minutes = int(config.get("ACCESS_TOKEN_EXPIRY_MINUTES", 15))
            refresh_days = int(config.get("REFRESH_TOKEN_EXPIRY_DAYS", 10))
        except (TypeError, ValueError) as exc:
            raise ConfigError("Token expiry settings must be integers.") from exc
        if access_minutes <= 0 or refresh_days <= 0:
            raise ConfigError("Token expiry settings must be positive.")

        samesite = str(config.get("COOKIE_SAMESITE", "Strict")).strip().capitalize()
        if samesite not in {"Strict", "Lax", "None"}:
            raise ConfigError("COOKIE_SAMESITE must be one of Strict, Lax or None.")

        return cls(
            access_token_secret=access_secret,
            refresh_token_secret=refresh_secret,
            access_token_ttl=timedelta(minutes=access_minutes),
            refresh_token_ttl=timedelta(days=refresh_days),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER") or None,
            cookie_secure=bool(config.get("COOKIE_SECURE", True)),
            cookie_samesite=samesite,
        )
