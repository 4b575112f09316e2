"""
Creation of the shared-calendar copies of discovered vacation events.
"""

import json
import logging

from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.debug import describe_event
from vacation_calendar_sync.models import CalendarSyncError
from vacation_calendar_sync.models import Result
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats
from vacation_calendar_sync.sanitizer import EventSanitizer
from vacation_calendar_sync.sync.utils import classify_error
from vacation_calendar_sync.sync.utils import log_failure

logger = logging.getLogger(__name__)


def publish_event(
    config: SyncConfig,
    stats: SyncStats,
    client,
    event: dict,
    group_id: str,
    org_timezone: str | None,
) -> Result[str]:
    """Create the sanitized copy of ``event`` in the group calendar."""
    payload = EventSanitizer.sanitize(event, org_timezone)

    if config.dry_run:
        logger.info(f"[DRY RUN] Would CREATE event: {payload['subject']}")
        stats.created += 1
        return Result.success("")

    try:
        created = client.create_group_event(group_id, payload)
    except CalendarSyncError as e:
        dump = json.dumps(event, default=str)
        log_failure(logger, f"Couldn't create event {dump}", e)
        stats.errors += 1
        stats.failures.append(f"create {payload['subject']}")
        return Result.failure(classify_error(e), f"Couldn't create event {dump}", e)

    stats.created += 1
    logger.debug(f"Created {payload['subject']} as {created.get('id')}")
    return Result.success(created.get("id", ""))


def publish_events(
    config: SyncConfig,
    stats: SyncStats,
    client,
    events: list[dict],
    group_id: str,
    org_timezone: str | None,
    progress: ProgressReporter | None = None,
) -> int:
    """Publish every event; returns how many were created."""
    created = 0
    for event in events:
        if progress:
            progress.item(f"create: {describe_event(event)}")
        if publish_event(config, stats, client, event, group_id, org_timezone).ok:
            created += 1
    if progress:
        progress.finish()
    return created
