from __future__ import annotations

import logging
from typing import Any, Optional

from supabase import AuthError as ProviderAuthError
from supabase import Client

from auth.state import CurrentUserState
from config.settings import Settings, get_settings
from core.errors import AuthError
from db.client import get_public_client


logger = logging.getLogger("voicelog.auth")

LOCAL_FALLBACK_URL = "http://localhost:5173/"
CALLBACK_PATH = "auth/callback"


def resolve_site_url(settings: Settings, origin: Optional[str] = None) -> str:
    """Base URL for auth callback links, always with a scheme and trailing slash.

    Priority: PUBLIC_SITE_URL, then the platform-provided VERCEL_URL, then the
    origin of the calling UI, then the local dev server.
    """
    candidates = (settings.public_site_url, settings.vercel_url, origin, LOCAL_FALLBACK_URL)
    url = next(c for c in candidates if c)
    url = url if url.startswith("http") else f"https://{url}"
    return url if url.endswith("/") else f"{url}/"


def _user_of(session: Any) -> Optional[Any]:
    return getattr(session, "user", None) if session else None


class AuthSubscription:
    """Handle for an auth-state subscription; ``unsubscribe`` is idempotent."""

    def __init__(self, provider_subscription: Any) -> None:
        self._subscription = provider_subscription
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._subscription.unsubscribe()


class AuthFacade:
    """Sign-up/sign-in/sign-out on top of Supabase Auth.

    Keeps ``state`` in sync with the provider session: ``init`` loads the
    current session and subscribes to auth-state changes until ``teardown``.
    """

    def __init__(
        self,
        client: Client,
        state: CurrentUserState,
        settings: Optional[Settings] = None,
    ) -> None:
        self._client = client
        self.state = state
        self._settings = settings or get_settings()
        self._subscription: Optional[AuthSubscription] = None

    def init(self) -> AuthSubscription:
        self.state.set_loading(True)
        try:
            session = self._client.auth.get_session()
        except ProviderAuthError as exc:
            self.state.set_loading(False)
            logger.error("Session lookup failed: %s", exc)
            raise AuthError(f"Could not load session: {exc.message}") from exc
        self.state.set_user(_user_of(session))

        if self._subscription is not None:
            self._subscription.unsubscribe()
        self._subscription = AuthSubscription(
            self._client.auth.on_auth_state_change(self._on_auth_state_change)
        )

        self.state.set_loading(False)
        return self._subscription

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        logger.info("Auth state changed: event=%s", event)
        self.state.set_user(_user_of(session))

    def sign_up(self, email: str, password: str, origin: Optional[str] = None) -> Any:
        redirect_to = f"{resolve_site_url(self._settings, origin)}{CALLBACK_PATH}"
        try:
            return self._client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"email_redirect_to": redirect_to},
                }
            )
        except ProviderAuthError as exc:
            logger.error("Sign-up failed: %s", exc)
            raise AuthError(exc.message) from exc

    def sign_in(self, email: str, password: str) -> Any:
        try:
            return self._client.auth.sign_in_with_password({"email": email, "password": password})
        except ProviderAuthError as exc:
            logger.error("Sign-in failed: %s", exc)
            raise AuthError(exc.message) from exc

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except ProviderAuthError as exc:
            logger.error("Sign-out failed: %s", exc)
            raise AuthError(exc.message) from exc
        self.state.set_user(None)

    def teardown(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


def build_auth_facade(state: Optional[CurrentUserState] = None) -> AuthFacade:
    """Facade over the public (anon key) Supabase client."""
    return AuthFacade(get_public_client(), state or CurrentUserState())
