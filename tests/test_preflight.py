"""
Unit tests for the configuration preflight checks.
"""

from rich.console import Console

from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.preflight import check_config
from vacation_calendar_sync.preflight import run_preflight_checks


def _labels(cfg: SyncConfig) -> list[str]:
    return [label for label, _, _ in check_config(cfg)]


def test_default_config_passes():
    assert check_config(SyncConfig()) == []


def test_ids_must_be_guids():
    cfg = SyncConfig(client_id="my-app", tenant_id="contoso.onmicrosoft.com")
    assert _labels(cfg) == ["Client ID", "Tenant ID"]


def test_group_and_keywords_must_be_present():
    cfg = SyncConfig(group_name="  ", keywords=())
    assert _labels(cfg) == ["Group", "Keywords"]


def test_blank_and_control_character_keywords_are_rejected():
    cfg = SyncConfig(keywords=("Urlaub", " ", "Ferien\n"))
    assert _labels(cfg) == ["Keywords", "Keywords"]


def test_issues_are_printed_and_block_the_run():
    console = Console(record=True, width=120)

    assert not run_preflight_checks(SyncConfig(client_id="nope"), console)

    output = console.export_text()
    assert "Preflight checks failed" in output
    assert "Client ID" in output
