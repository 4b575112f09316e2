"""
VacationSynchronizer — thin orchestrator that delegates to sync submodules.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from vacation_calendar_sync.auth import TokenProvider
from vacation_calendar_sync.auth import build_flow
from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.graph_client import GraphClient
from vacation_calendar_sync.models import DateWindow
from vacation_calendar_sync.models import RunState
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats
from vacation_calendar_sync.sync.clean import clean_calendar
from vacation_calendar_sync.sync.group import fetch_mailbox_timezone
from vacation_calendar_sync.sync.group import resolve_group
from vacation_calendar_sync.sync.publish import publish_events
from vacation_calendar_sync.sync.scan import scan_members


def build_client(config: SyncConfig, prompt: Callable[[str], None] = print) -> GraphClient:
    """Graph client whose token provider uses the configured sign-in flow."""
    flow = build_flow(config.auth_mode, prompt)
    provider = TokenProvider(config.client_id, config.tenant_id, flow)
    return GraphClient(provider)


class VacationSynchronizer:
    """Main synchronization engine.

    Authenticate → ResolveGroup → FetchMailboxSettings → Clean → Scan →
    Publish → Done. Only the group lookup and the mailbox settings abort the
    run; every other failure is logged, counted in ``stats`` and skipped.
    """

    def __init__(
        self,
        config: SyncConfig,
        client=None,
        progress: ProgressReporter | None = None,
        now: datetime | None = None,
    ):
        self.config = config
        self.client = client if client is not None else build_client(config)
        self.progress = progress
        self.logger = logging.getLogger(__name__)
        self.stats = SyncStats()
        self.now = now
        # preview for the info panel; recomputed when the run starts
        self.window = DateWindow.around(now)

    def _abort(self) -> SyncStats:
        self.logger.error(f"Run aborted during {self.stats.state.value}")
        self.stats.state = RunState.ABORTED
        return self.stats

    def _prepare(self) -> str | None:
        """Authenticate and resolve the group; None means the run must stop."""
        self.stats.state = RunState.AUTHENTICATE
        self.logger.info("Signing in to Microsoft Graph...")
        self.client.authenticate()

        self.stats.state = RunState.RESOLVE_GROUP
        self.logger.info(f"Resolving group {self.config.group_name!r}...")
        group = resolve_group(self.client, self.config.group_name)
        if not group.ok:
            return None
        return group.value

    def run(self) -> SyncStats:
        """Execute the synchronization process."""
        self.window = DateWindow.around(self.now)
        group_id = self._prepare()
        if group_id is None:
            return self._abort()

        if self.config.clear_only:
            self.stats.state = RunState.CLEAN
            self.logger.info("Removing synced entries...")
            clean_calendar(
                self.config, self.stats, self.client, group_id, self.window, self.progress
            )
            self.stats.state = RunState.DONE
            return self.stats

        self.stats.state = RunState.FETCH_MAILBOX_SETTINGS
        mailbox_tz = fetch_mailbox_timezone(self.client)
        if not mailbox_tz.ok:
            return self._abort()

        self.stats.state = RunState.CLEAN
        self.logger.info("Removing previously synced entries...")
        clean_calendar(self.config, self.stats, self.client, group_id, self.window, self.progress)

        self.stats.state = RunState.SCAN
        self.logger.info("Scanning member calendars...")
        events = scan_members(
            self.config, self.stats, self.client, group_id, self.window, self.progress
        )
        self.logger.info(f"Found {len(events)} vacation entries")

        self.stats.state = RunState.PUBLISH
        publish_events(
            self.config,
            self.stats,
            self.client,
            events,
            group_id,
            mailbox_tz.value,
            self.progress,
        )

        self.stats.state = RunState.DONE
        return self.stats

    def discover(self) -> list[dict] | None:
        """Scan only: the events a sync would publish, or None if the group is unknown."""
        self.window = DateWindow.around(self.now)
        group_id = self._prepare()
        if group_id is None:
            self._abort()
            return None
        self.stats.state = RunState.SCAN
        events = scan_members(
            self.config, self.stats, self.client, group_id, self.window, self.progress
        )
        self.stats.state = RunState.DONE
        return events
