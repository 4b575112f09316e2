"""
Removal of previously synced vacation entries from the group calendar.
"""

import logging

from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.debug import describe_event
from vacation_calendar_sync.models import CalendarSyncError
from vacation_calendar_sync.models import DateWindow
from vacation_calendar_sync.models import Result
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats
from vacation_calendar_sync.sync.utils import classify_error
from vacation_calendar_sync.sync.utils import log_failure

logger = logging.getLogger(__name__)


def clean_calendar(
    config: SyncConfig,
    stats: SyncStats,
    client,
    group_id: str,
    window: DateWindow,
    progress: ProgressReporter | None = None,
) -> Result[int]:
    """Delete every vacation event inside ``window`` from the group calendar.

    The full listing is collected before the first delete so that removals do
    not shift the server's paging. A failed delete is logged and counted; the
    remaining events are still processed. A failed listing returns a failure
    result and nothing is deleted.
    """
    try:
        entries = list(client.list_group_events(group_id, window, config.keywords))
    except CalendarSyncError as e:
        log_failure(logger, "Couldn't get calendar entries to clean", e)
        stats.errors += 1
        stats.failures.append("list group calendar")
        return Result.failure(classify_error(e), "Couldn't get calendar entries to clean", e)

    logger.info(f"Found {len(entries)} synced entries to remove")

    deleted = 0
    for entry in entries:
        event_id = entry.get("id")
        if progress:
            progress.item(f"delete: {describe_event(entry)}")

        if config.dry_run:
            logger.info(f"[DRY RUN] Would DELETE event: {describe_event(entry)}")
            deleted += 1
            continue

        try:
            client.delete_group_event(group_id, event_id)
            deleted += 1
        except CalendarSyncError as e:
            log_failure(logger, f"Couldn't delete event {event_id}", e)
            stats.errors += 1
            stats.failures.append(f"delete {event_id}")

    if progress:
        progress.finish()

    stats.deleted += deleted
    return Result.success(deleted)
