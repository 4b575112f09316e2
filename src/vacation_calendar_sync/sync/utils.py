"""
Stateless event-inspection and error-reporting helpers.
"""

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from datetime import timezone
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from vacation_calendar_sync.graph_client import USER_ODATA_TYPE
from vacation_calendar_sync.models import DateWindow
from vacation_calendar_sync.models import ErrorKind
from vacation_calendar_sync.models import GraphError
from vacation_calendar_sync.sanitizer import EventSanitizer

_logger = logging.getLogger(__name__)

PRIVATE_SENSITIVITY = "private"

# Graph sends seven fractional digits ("2026-03-01T00:00:00.0000000");
# datetime only accepts up to six.
_FRACTION_RE = re.compile(r"\.(\d{1,6})\d*")


def parse_graph_datetime(value: dict | None) -> datetime | None:
    """Convert a Graph ``dateTimeTimeZone`` object into an aware datetime.

    Unknown (e.g. Windows-style) zone names are treated as UTC, which is what
    Graph returns by default when no ``Prefer: outlook.timezone`` is sent.
    """
    if not value or not value.get("dateTime"):
        return None
    raw = _FRACTION_RE.sub(lambda m: "." + m.group(1).ljust(6, "0"), value["dateTime"].rstrip("Z"))
    moment = datetime.fromisoformat(raw)
    if moment.tzinfo is not None:
        return moment
    tz_name = value.get("timeZone") or "UTC"
    try:
        tz = timezone.utc if tz_name.upper() == "UTC" else ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = timezone.utc
    return moment.replace(tzinfo=tz)


def subject_matches(subject: str | None, keywords: Iterable[str]) -> bool:
    """Case-sensitive substring match against any keyword."""
    subject = subject or ""
    return any(keyword in subject for keyword in keywords)


def is_user_member(member: dict) -> bool:
    return member.get("@odata.type") == USER_ODATA_TYPE


def is_enabled_user(member: dict) -> bool:
    # A missing flag is treated as enabled; only an explicit False skips the user.
    return is_user_member(member) and member.get("accountEnabled") is not False


def is_organized_by(event: dict, email: str | None) -> bool:
    """True when ``email`` is the event's organizer (not merely an attendee)."""
    if not email:
        return False
    return EventSanitizer.organizer_address(event).casefold() == email.casefold()


def is_private(event: dict) -> bool:
    return (event.get("sensitivity") or "").lower() == PRIVATE_SENSITIVITY


def is_relevant_event(event: dict, member_email: str | None) -> bool:
    return is_organized_by(event, member_email) and not is_private(event)


def classify_error(e: Exception) -> ErrorKind:
    if not isinstance(e, GraphError):
        return ErrorKind.SERVICE
    if e.status is None:
        return ErrorKind.TRANSPORT
    if e.status == 404:
        return ErrorKind.NOT_FOUND
    return ErrorKind.SERVICE


def log_failure(logger: logging.Logger, message: str, e: Exception) -> None:
    """Log ``message`` with the exception, its traceback and the OData detail if any."""
    logger.error("%s: %s", message, e, exc_info=e)
    if isinstance(e, GraphError) and e.detail:
        logger.error("\t%s", e.detail)


def is_within_window(event: dict, window: DateWindow) -> bool:
    """calendarView also returns events overlapping the window edges; those are dropped.

    Events whose start or end cannot be parsed are dropped as well.
    """
    try:
        start = parse_graph_datetime(event.get("start"))
        end = parse_graph_datetime(event.get("end"))
    except ValueError as e:
        _logger.warning("Skipping event %r with unreadable dates: %s", event.get("subject"), e)
        return False
    if start is None or end is None:
        return False
    return window.contains(start, end)
