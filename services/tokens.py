"""Token issuer: signs and verifies the access/refresh JWT pair."""
from __future__ import annotations

from utils.security import (
    ACCESS,
    REFRESH,
    TokenClaims,
    create_token,
    verify_token,
)

from services.settings import AuthSettings


class TokenIssuer:
    """
    Issues short-lived access tokens and longer-lived refresh tokens, each
    signed with its own secret. Issuing never persists anything; storing the
    refresh token is the caller's job.
    """

    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def issue_access_token(self, user_id: str) -> str:
        return create_token(
            subject=user_id,
            secret=self.settings.access_token_secret,
            expires_in=self.settings.access_token_ttl,
            token_type=ACCESS,
            algorithm=self.settings.algorithm,
            issuer=self.settings.issuer,
        )

    def issue_refresh_token(self, user_id: str) -> str:
        return create_token(
            subject=user_id,
            secret=self.settings.refresh_token_secret,
            expires_in=self.settings.refresh_token_ttl,
            token_type=REFRESH,
            algorithm=self.settings.algorithm,
            issuer=self.settings.issuer,
        )

    def verify_access_token(self, token: str) -> TokenClaims:
        return verify_token(
            token,
            self.settings.access_token_secret,
            algorithm=self.settings.algorithm,
            expected_type=ACCESS,
            issuer=self.settings.issuer,
        )

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return verify_token(
            token,
            self.settings.refresh_token_secret,
            algorithm=self.settings.algorithm,
            expected_type=REFRESH,
            issuer=self.settings.issuer,
        )
