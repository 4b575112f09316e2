"""
Shared pytest fixtures and Graph payload helpers.
"""

from datetime import datetime
from datetime import timezone

import pytest

from vacation_calendar_sync.models import DateWindow
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats

# Window for NOW: 2026-09-19T12:00Z .. 2027-04-19T12:00Z
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

GROUP_NAME = "Sales"
GROUP_ID = "group-sales"
ORG_TZ = "W. Europe Standard Time"


def make_user(
    user_id: str,
    mail: str | None = None,
    enabled: bool | None = True,
    name: str | None = None,
) -> dict:
    """Return a member directory object as listed by /groups/{id}/members."""
    member = {
        "@odata.type": "#microsoft.graph.user",
        "id": user_id,
        "displayName": name or user_id,
        "mail": mail if mail is not None else f"{user_id}@example.com",
    }
    if enabled is not None:
        member["accountEnabled"] = enabled
    return member


def make_event(
    subject: str,
    organizer: str,
    organizer_name: str | None = None,
    start: str = "2026-11-02T00:00:00.0000000",
    end: str = "2026-11-07T00:00:00.0000000",
    tz: str = "UTC",
    all_day: bool = False,
    sensitivity: str = "normal",
    event_id: str | None = None,
) -> dict:
    """Return a minimal Graph event as returned by calendarView."""
    event = {
        "subject": subject,
        "start": {"dateTime": start, "timeZone": tz},
        "end": {"dateTime": end, "timeZone": tz},
        "isAllDay": all_day,
        "sensitivity": sensitivity,
        "organizer": {
            "emailAddress": {
                "name": organizer_name or organizer.split("@")[0],
                "address": organizer,
            }
        },
    }
    if event_id:
        event["id"] = event_id
    return event


@pytest.fixture
def window():
    return DateWindow.around(NOW)


@pytest.fixture
def sync_config():
    return SyncConfig(group_name=GROUP_NAME, verbose=False)


@pytest.fixture
def sync_stats():
    return SyncStats()
