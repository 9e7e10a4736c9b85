"""
🔑 Auth Service - Spotify account connection
============================================

Wraps the token manager for the login/callback routes and health output.
"""

from ..api.auth import TokenManager
from ..api.errors import AuthError, SpotifyApiError
from ..api.spotify import PlaybackClient
from ..constants import OAUTH_SCOPES
from ..utils.state_store import CredentialStore
from . import BaseService, ServiceResult


class AuthService(BaseService):
    """Service for the OAuth authorization-code flow."""

    def __init__(self, store: CredentialStore, token_manager: TokenManager, client: PlaybackClient):
        super().__init__("auth")
        self._store = store
        self._tokens = token_manager
        self._client = client

    def login_url(self, state: str) -> ServiceResult:
        url = self._tokens.authorize_url(OAUTH_SCOPES, state)
        return self._success_result(data={"url": url})

    def complete_login(self, code: str) -> ServiceResult:
        """Exchange the callback code and remember the account's display name.

        The tokens are persisted on success. A failed profile lookup does not
        fail the login; the status page then shows no account name.
        """
        try:
            self._tokens.exchange_code(code)
        except AuthError as exc:
            self.logger.error(f"❌ Code exchange failed: {exc.message}")
            return self._error_result(exc.message, error_code="auth_failed", data=exc.to_dict())

        try:
            profile = self._client.get_me()
        except SpotifyApiError as exc:
            self.logger.warning(f"Profile lookup after login failed: {exc.message}")
            profile = {}
        account_name = profile.get("display_name") or profile.get("id")
        self._store.patch(account_name=account_name)
        return self._success_result(data={"account_name": account_name}, message="Spotify account connected")

    def status(self) -> ServiceResult:
        return self._success_result(data=self._tokens.token_state())

    def health_check(self) -> ServiceResult:
        state = self._tokens.token_state()
        return ServiceResult(
            success=True,
            data={
                "status": "healthy" if state["authenticated"] else "degraded",
                "service": self.name,
                "authenticated": state["authenticated"],
            },
        )
