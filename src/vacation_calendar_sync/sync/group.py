"""
Lookups that gate the run: the target group and the signed-in user's timezone.
"""

import logging

from vacation_calendar_sync.models import CalendarSyncError
from vacation_calendar_sync.models import ErrorKind
from vacation_calendar_sync.models import Result
from vacation_calendar_sync.sync.utils import classify_error
from vacation_calendar_sync.sync.utils import log_failure

logger = logging.getLogger(__name__)


def resolve_group(client, group_name: str) -> Result[str]:
    """Return the id of the group whose display name equals ``group_name``."""
    try:
        groups = client.find_groups(group_name)
    except CalendarSyncError as e:
        log_failure(logger, f"Couldn't get group {group_name}", e)
        return Result.failure(classify_error(e), f"Couldn't get group {group_name}", e)

    if not groups or not groups[0].get("id"):
        message = f"Could not find group with name {group_name}"
        logger.error(message)
        return Result.failure(ErrorKind.NOT_FOUND, message)

    if len(groups) > 1:
        logger.warning("%d groups named %r, using the first one", len(groups), group_name)

    group_id = groups[0]["id"]
    logger.debug("Resolved group %r to %s", group_name, group_id)
    return Result.success(group_id)


def fetch_mailbox_timezone(client) -> Result[str | None]:
    """The signed-in user's mailbox timezone, used for all-day events."""
    try:
        settings = client.get_mailbox_settings()
    except CalendarSyncError as e:
        log_failure(logger, "Couldn't get mailbox settings", e)
        return Result.failure(classify_error(e), "Couldn't get mailbox settings", e)

    tz = settings.get("timeZone") or None
    logger.debug("Mailbox timezone: %s", tz)
    return Result.success(tz)
