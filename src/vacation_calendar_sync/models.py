"""
Pure data models — no HTTP or msal imports.
"""

import calendar
import enum
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import Generic
from typing import TypeVar

DEFAULT_CONFIG = Path.home() / ".config/vacation-calendar-sync.conf"

DEFAULT_GROUP_NAME = "4PS Deutschland"
DEFAULT_CLIENT_ID = "bc6a5c42-f082-4b55-9a87-e765f30a1ba4"
DEFAULT_TENANT_ID = "92f4dd01-f0ea-4b5f-97f2-505c2945189c"
DEFAULT_KEYWORDS = ("Urlaub", "Vacation", "urlaub", "vacation")

GRAPH_SCOPES = (
    "User.Read",
    "Calendars.ReadWrite.Shared",
    "Group.ReadWrite.All",
    "MailboxSettings.Read",
)

# Set by container images; selects the device-code flow.
HEADLESS_ENV_VAR = "RUNNING_IN_CONTAINER"

WINDOW_MONTHS_BACK = 1
WINDOW_MONTHS_AHEAD = 6


class CalendarSyncError(Exception):
    """Base exception for calendar sync errors."""

    pass


class AuthenticationError(CalendarSyncError):
    """Raised when no access token could be obtained."""

    pass


class GraphError(CalendarSyncError):
    """A failed Graph request.

    ``code`` and ``detail`` come from the OData error envelope
    (``{"error": {"code": ..., "message": ...}}``) when the service sent one.
    ``status`` is None for transport failures that never got a response.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.detail = detail


class AuthMode(str, enum.Enum):
    INTERACTIVE = "interactive"
    DEVICE_CODE = "device-code"


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not-found"
    SERVICE = "service"
    TRANSPORT = "transport"


class RunState(str, enum.Enum):
    AUTHENTICATE = "authenticate"
    RESOLVE_GROUP = "resolve-group"
    FETCH_MAILBOX_SETTINGS = "fetch-mailbox-settings"
    CLEAN = "clean"
    SCAN = "scan"
    PUBLISH = "publish"
    DONE = "done"
    ABORTED = "aborted"


T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of a single pipeline operation: a value or an error kind."""

    value: T | None = None
    error: ErrorKind | None = None
    message: str = ""
    exception: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, exception: Exception | None = None
    ) -> "Result[T]":
        return cls(error=kind, message=message, exception=exception)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months, clamping the day (Jan 31 + 1 → Feb 28/29)."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class DateWindow:
    """The rolling range used for both cleanup and discovery."""

    start: datetime
    end: datetime

    @classmethod
    def around(cls, now: datetime | None = None) -> "DateWindow":
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.astimezone()
        now = now.astimezone(timezone.utc)
        return cls(
            start=add_months(now, -WINDOW_MONTHS_BACK),
            end=add_months(now, WINDOW_MONTHS_AHEAD),
        )

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


@dataclass
class SyncConfig:
    """Configuration for a vacation sync run."""

    group_name: str = DEFAULT_GROUP_NAME
    client_id: str = DEFAULT_CLIENT_ID
    tenant_id: str = DEFAULT_TENANT_ID
    keywords: tuple[str, ...] = DEFAULT_KEYWORDS
    auth_mode: AuthMode = AuthMode.INTERACTIVE
    dry_run: bool = False
    verbose: bool = False
    yes: bool = False  # Auto-confirm without prompting
    wait: bool = True  # Wait for a keypress before exiting (interactive only)
    clear_only: bool = False


@dataclass
class SyncStats:
    """Statistics for a sync run."""

    deleted: int = 0
    created: int = 0
    members_scanned: int = 0
    members_skipped: int = 0
    events_found: int = 0
    errors: int = 0
    state: RunState = RunState.AUTHENTICATE
    failures: list[str] = field(default_factory=list)
