"""
Unit tests for the individual pipeline stages and their Result values.
"""

import logging

from rich.console import Console

from tests.conftest import GROUP_ID
from tests.conftest import GROUP_NAME
from tests.conftest import make_event
from tests.conftest import make_user
from tests.fake_client import FakeGraphClient
from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.models import ErrorKind
from vacation_calendar_sync.sync.clean import clean_calendar
from vacation_calendar_sync.sync.group import fetch_mailbox_timezone
from vacation_calendar_sync.sync.group import resolve_group
from vacation_calendar_sync.sync.publish import publish_event
from vacation_calendar_sync.sync.scan import scan_members


def test_resolve_group_returns_id():
    client = FakeGraphClient(groups={GROUP_NAME: GROUP_ID})

    result = resolve_group(client, GROUP_NAME)

    assert result.ok
    assert result.value == GROUP_ID


def test_resolve_group_not_found():
    result = resolve_group(FakeGraphClient(), GROUP_NAME)

    assert result.error == ErrorKind.NOT_FOUND
    assert "Could not find group with name Sales" in result.message


def test_resolve_group_service_error_is_captured(caplog):
    client = FakeGraphClient(groups={GROUP_NAME: GROUP_ID})
    client.fail_find_groups = True

    with caplog.at_level(logging.ERROR):
        result = resolve_group(client, GROUP_NAME)

    assert result.error == ErrorKind.SERVICE
    assert result.exception is not None
    assert f"Couldn't get group {GROUP_NAME}" in caplog.text


def test_mailbox_timezone():
    client = FakeGraphClient(mailbox_timezone="Romance Standard Time")
    assert fetch_mailbox_timezone(client).value == "Romance Standard Time"

    client.fail_mailbox = True
    assert not fetch_mailbox_timezone(client).ok


def test_clean_reports_number_deleted(sync_config, sync_stats, window):
    client = FakeGraphClient(
        group_events={
            GROUP_ID: [
                make_event("Urlaub (A)", "s@example.com", event_id="1"),
                make_event("Vacation (B)", "s@example.com", event_id="2"),
            ]
        }
    )

    result = clean_calendar(sync_config, sync_stats, client, GROUP_ID, window)

    assert result.ok
    assert result.value == 2
    assert sync_stats.deleted == 2


def test_clean_listing_failure_is_a_failed_result(sync_config, sync_stats, window):
    client = FakeGraphClient()
    client.fail_list_group_events = True

    result = clean_calendar(sync_config, sync_stats, client, GROUP_ID, window)

    assert not result.ok
    assert sync_stats.failures == ["list group calendar"]


def test_publish_failure_is_a_failed_result(sync_config, sync_stats):
    client = FakeGraphClient()
    client.fail_creates = {"Urlaub (A)"}

    result = publish_event(
        sync_config, sync_stats, client, make_event("Urlaub", "a@example.com", "A"), GROUP_ID, None
    )

    assert result.error == ErrorKind.SERVICE
    assert sync_stats.errors == 1
    assert sync_stats.created == 0


def test_progress_prints_one_dot_per_member(sync_config, sync_stats, window):
    console = Console(record=True, width=80)
    client = FakeGraphClient(
        members={GROUP_ID: [make_user("a"), make_user("b"), make_user("c", enabled=False)]},
    )

    scan_members(
        sync_config, sync_stats, client, GROUP_ID, window, ProgressReporter(console)
    )

    assert console.export_text() == "...\n"


def test_verbose_progress_logs_each_member(sync_config, sync_stats, window, caplog):
    console = Console(record=True, width=80)
    client = FakeGraphClient(members={GROUP_ID: [make_user("a")]})

    with caplog.at_level(logging.INFO):
        scan_members(
            sync_config,
            sync_stats,
            client,
            GROUP_ID,
            window,
            ProgressReporter(console, verbose=True),
        )

    assert console.export_text() == ""
    assert "work on: a@example.com (a)" in caplog.text
