"""
Discovery of vacation events in the personal calendars of group members.
"""

import logging

from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.models import CalendarSyncError
from vacation_calendar_sync.models import DateWindow
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats
from vacation_calendar_sync.sync.utils import is_enabled_user
from vacation_calendar_sync.sync.utils import is_relevant_event
from vacation_calendar_sync.sync.utils import is_user_member
from vacation_calendar_sync.sync.utils import is_within_window
from vacation_calendar_sync.sync.utils import log_failure

logger = logging.getLogger(__name__)


def list_members(stats: SyncStats, client, group_id: str) -> list[dict]:
    """All direct members of the group; empty (and logged) when the listing fails."""
    try:
        members = list(client.list_group_members(group_id))
    except CalendarSyncError as e:
        log_failure(logger, f"Couldn't get members for {group_id}", e)
        stats.errors += 1
        stats.failures.append(f"members of {group_id}")
        return []
    logger.debug(f"found {len(members)} members for group {group_id}")
    return members


def scan_member(
    config: SyncConfig, client, member: dict, window: DateWindow
) -> list[dict]:
    """Vacation events ``member`` organized inside ``window``, excluding private ones.

    Raises:
        CalendarSyncError: when the calendar query fails
    """
    email = member.get("mail")
    return [
        event
        for event in client.list_calendar_view(member["id"], window, config.keywords)
        if is_relevant_event(event, email) and is_within_window(event, window)
    ]


def scan_members(
    config: SyncConfig,
    stats: SyncStats,
    client,
    group_id: str,
    window: DateWindow,
    progress: ProgressReporter | None = None,
) -> list[dict]:
    """Collect vacation events from every enabled user in the group."""
    events: list[dict] = []

    for member in list_members(stats, client, group_id):
        if not is_user_member(member):
            continue

        email = member.get("mail")
        if progress:
            progress.item(f"work on: {email} ({member.get('id')})")

        if not is_enabled_user(member):
            logger.debug(f"Skipping disabled account {email}")
            stats.members_skipped += 1
            continue
        if not email:
            logger.debug(f"Skipping {member.get('id')} without a mail address")
            stats.members_skipped += 1
            continue

        try:
            found = scan_member(config, client, member, window)
        except CalendarSyncError as e:
            log_failure(logger, f"Couldn't get events for {email}", e)
            stats.errors += 1
            stats.members_skipped += 1
            stats.failures.append(f"calendar of {email}")
            continue

        logger.debug(f"\tfound {len(found)} relevant entries for {email}")
        stats.members_scanned += 1
        events.extend(found)

    if progress:
        progress.finish()

    stats.events_found += len(events)
    return events
