"""
Delegated sign-in against the Microsoft identity platform.

The credential flow is chosen once at startup (see ``select_auth_mode``) and
injected into a ``TokenProvider``; every Graph request then asks that same
provider for a token.
"""

import logging
import os
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence

import msal

from vacation_calendar_sync.models import GRAPH_SCOPES
from vacation_calendar_sync.models import HEADLESS_ENV_VAR
from vacation_calendar_sync.models import AuthenticationError
from vacation_calendar_sync.models import AuthMode

logger = logging.getLogger(__name__)

AUTHORITY_HOST = "https://login.microsoftonline.com"


def select_auth_mode(env: Mapping[str, str] | None = None) -> AuthMode:
    """Device-code flow inside containers (no browser), browser flow otherwise."""
    env = os.environ if env is None else env
    if env.get(HEADLESS_ENV_VAR, "").strip().lower() == "true":
        return AuthMode.DEVICE_CODE
    return AuthMode.INTERACTIVE


class InteractiveBrowserFlow:
    """Opens the system browser and receives the redirect on http://localhost."""

    def acquire(self, app: msal.PublicClientApplication, scopes: Sequence[str]) -> dict:
        logger.info("Opening browser for sign-in...")
        return app.acquire_token_interactive(scopes=list(scopes))


class DeviceCodeFlow:
    """Prints a code the user redeems on another device."""

    def __init__(self, prompt: Callable[[str], None] = print):
        self.prompt = prompt

    def acquire(self, app: msal.PublicClientApplication, scopes: Sequence[str]) -> dict:
        flow = app.initiate_device_flow(scopes=list(scopes))
        if "user_code" not in flow:
            raise AuthenticationError(
                f"Could not start device-code flow: "
                f"{flow.get('error', 'unknown_error')} - "
                f"{flow.get('error_description', 'No description')}"
            )
        self.prompt(flow["message"])
        return app.acquire_token_by_device_flow(flow)


def build_flow(mode: AuthMode, prompt: Callable[[str], None] = print):
    if mode == AuthMode.DEVICE_CODE:
        return DeviceCodeFlow(prompt)
    return InteractiveBrowserFlow()


class TokenProvider:
    """Process-wide source of Graph access tokens.

    The first call runs the injected flow; later calls are served silently from
    msal's in-memory cache (refreshing when the access token has expired).
    """

    def __init__(
        self,
        client_id: str,
        tenant_id: str,
        flow,
        scopes: Sequence[str] = GRAPH_SCOPES,
        app: msal.PublicClientApplication | None = None,
    ):
        self.scopes = list(scopes)
        self.flow = flow
        self.app = app or msal.PublicClientApplication(
            client_id,
            authority=f"{AUTHORITY_HOST}/{tenant_id}",
        )

    def get_token(self) -> str:
        result = None
        accounts = self.app.get_accounts()
        if accounts:
            result = self.app.acquire_token_silent(self.scopes, account=accounts[0])

        if not result or "access_token" not in result:
            logger.debug("No cached token, starting %s", type(self.flow).__name__)
            result = self.flow.acquire(self.app, self.scopes)

        if result and "access_token" in result:
            return result["access_token"]

        result = result or {}
        error = result.get("error", "unknown_error")
        error_desc = result.get("error_description", "No description")
        raise AuthenticationError(f"Authentication failed: {error} - {error_desc}")
