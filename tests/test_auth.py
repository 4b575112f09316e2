"""
Unit tests for sign-in flow selection and the token provider.

msal is replaced by FakeMsalApp so no browser or device code is involved.
"""

import pytest

from vacation_calendar_sync.auth import DeviceCodeFlow
from vacation_calendar_sync.auth import InteractiveBrowserFlow
from vacation_calendar_sync.auth import TokenProvider
from vacation_calendar_sync.auth import build_flow
from vacation_calendar_sync.auth import select_auth_mode
from vacation_calendar_sync.models import GRAPH_SCOPES
from vacation_calendar_sync.models import AuthenticationError
from vacation_calendar_sync.models import AuthMode


class FakeMsalApp:
    """Just enough of msal.PublicClientApplication for TokenProvider."""

    def __init__(self, interactive_result=None, device_flow=None, device_result=None):
        self.accounts: list[dict] = []
        self.silent_result = None
        self.interactive_result = interactive_result or {"access_token": "interactive"}
        self.device_flow = device_flow or {"user_code": "ABCD", "message": "Go to the URL"}
        self.device_result = device_result or {"access_token": "device"}
        self.calls: list[str] = []

    def get_accounts(self):
        return self.accounts

    def acquire_token_silent(self, scopes, account):
        self.calls.append("silent")
        return self.silent_result

    def acquire_token_interactive(self, scopes):
        self.calls.append("interactive")
        self.accounts = [{"username": "a@example.com"}]
        return self.interactive_result

    def initiate_device_flow(self, scopes):
        self.calls.append("initiate_device_flow")
        return self.device_flow

    def acquire_token_by_device_flow(self, flow):
        self.calls.append("device")
        return self.device_result


# ---------------------------------------------------------------------------
# Mode selection
# ---------------------------------------------------------------------------


def test_container_flag_selects_device_code():
    assert select_auth_mode({"RUNNING_IN_CONTAINER": "true"}) == AuthMode.DEVICE_CODE
    assert select_auth_mode({"RUNNING_IN_CONTAINER": "TRUE "}) == AuthMode.DEVICE_CODE


def test_without_container_flag_interactive_is_used():
    assert select_auth_mode({}) == AuthMode.INTERACTIVE
    assert select_auth_mode({"RUNNING_IN_CONTAINER": "false"}) == AuthMode.INTERACTIVE


def test_build_flow_maps_modes_to_strategies():
    assert isinstance(build_flow(AuthMode.INTERACTIVE), InteractiveBrowserFlow)
    assert isinstance(build_flow(AuthMode.DEVICE_CODE), DeviceCodeFlow)


# ---------------------------------------------------------------------------
# TokenProvider
# ---------------------------------------------------------------------------


def test_first_token_runs_the_flow_then_uses_the_cache():
    app = FakeMsalApp()
    provider = TokenProvider("client", "tenant", InteractiveBrowserFlow(), app=app)

    assert provider.get_token() == "interactive"
    app.silent_result = {"access_token": "cached"}
    assert provider.get_token() == "cached"

    assert app.calls == ["interactive", "silent"]


def test_expired_cache_falls_back_to_the_flow():
    app = FakeMsalApp()
    app.accounts = [{"username": "a@example.com"}]
    app.silent_result = None
    provider = TokenProvider("client", "tenant", InteractiveBrowserFlow(), app=app)

    assert provider.get_token() == "interactive"
    assert app.calls == ["silent", "interactive"]


def test_device_code_message_is_shown_to_the_user():
    shown = []
    app = FakeMsalApp()
    provider = TokenProvider("client", "tenant", DeviceCodeFlow(shown.append), app=app)

    assert provider.get_token() == "device"
    assert shown == ["Go to the URL"]
    assert provider.scopes == list(GRAPH_SCOPES)


def test_device_flow_that_cannot_start_raises():
    app = FakeMsalApp(device_flow={"error": "invalid_client", "error_description": "bad app"})
    provider = TokenProvider("client", "tenant", DeviceCodeFlow(lambda _: None), app=app)

    with pytest.raises(AuthenticationError, match="invalid_client"):
        provider.get_token()
    assert "device" not in app.calls


def test_failed_sign_in_raises_with_error_description():
    app = FakeMsalApp(
        interactive_result={"error": "access_denied", "error_description": "user cancelled"}
    )
    provider = TokenProvider("client", "tenant", InteractiveBrowserFlow(), app=app)

    with pytest.raises(AuthenticationError, match="access_denied - user cancelled"):
        provider.get_token()
