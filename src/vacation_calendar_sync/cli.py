"""
Command-line interface for Vacation Calendar Sync.
"""

import logging
from configparser import ConfigParser
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vacation_calendar_sync.auth import select_auth_mode
from vacation_calendar_sync.debug import ProgressReporter
from vacation_calendar_sync.debug import dump_event
from vacation_calendar_sync.graph_client import format_graph_datetime
from vacation_calendar_sync.models import DEFAULT_CLIENT_ID
from vacation_calendar_sync.models import DEFAULT_CONFIG
from vacation_calendar_sync.models import DEFAULT_GROUP_NAME
from vacation_calendar_sync.models import DEFAULT_KEYWORDS
from vacation_calendar_sync.models import DEFAULT_TENANT_ID
from vacation_calendar_sync.models import AuthMode
from vacation_calendar_sync.models import CalendarSyncError
from vacation_calendar_sync.models import RunState
from vacation_calendar_sync.models import SyncConfig
from vacation_calendar_sync.models import SyncStats
from vacation_calendar_sync.preflight import run_preflight_checks
from vacation_calendar_sync.sanitizer import EventSanitizer
from vacation_calendar_sync.sync import VacationSynchronizer
from vacation_calendar_sync.sync import build_client

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Copy group members' vacation entries into the group's shared calendar.",
)

console = Console()

CONFIG_SECTION = "vacation-sync"


# ---------------------------------------------------------------------------
# Global state shared across subcommands
# ---------------------------------------------------------------------------


@dataclass
class _State:
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG)
    verbose: bool = False


state = _State()


@app.callback()
def _global(
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help=f"Config file path (default: {DEFAULT_CONFIG})"),
    ] = DEFAULT_CONFIG,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print every member and event instead of dots"),
    ] = False,
) -> None:
    state.config_path = config
    state.verbose = verbose
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, console=console)],
        force=True,
    )
    # msal and urllib3 are chatty at DEBUG and would print tokens in request logs
    logging.getLogger("msal").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load_config_file(config_path: Path) -> dict[str, str]:
    if not config_path.exists():
        return {}
    parser = ConfigParser()
    parser.read(config_path)
    if CONFIG_SECTION not in parser:
        return {}
    return dict(parser[CONFIG_SECTION])


def _parse_keywords(raw: str) -> tuple[str, ...]:
    return tuple(k.strip() for k in raw.split(",") if k.strip())


def _build_config(
    group: str | None,
    client_id: str | None,
    tenant_id: str | None,
    keywords: list[str] | None,
    auth_mode: AuthMode | None,
    dry_run: bool = False,
    yes: bool = False,
    wait: bool = True,
    clear_only: bool = False,
) -> SyncConfig:
    config_file = _load_config_file(state.config_path)

    if keywords:
        resolved_keywords = tuple(keywords)
    elif config_file.get("keywords"):
        resolved_keywords = _parse_keywords(config_file["keywords"])
    else:
        resolved_keywords = DEFAULT_KEYWORDS

    if auth_mode is None:
        file_mode = config_file.get("auth_mode")
        if file_mode:
            try:
                auth_mode = AuthMode(file_mode.strip().lower())
            except ValueError:
                raise typer.BadParameter(
                    f"auth_mode in {state.config_path} must be 'interactive' or 'device-code'"
                ) from None
        else:
            auth_mode = select_auth_mode()

    return SyncConfig(
        group_name=group or config_file.get("group_name") or DEFAULT_GROUP_NAME,
        client_id=client_id or config_file.get("client_id") or DEFAULT_CLIENT_ID,
        tenant_id=tenant_id or config_file.get("tenant_id") or DEFAULT_TENANT_ID,
        keywords=resolved_keywords,
        auth_mode=auth_mode,
        dry_run=dry_run,
        verbose=state.verbose,
        yes=yes,
        wait=wait,
        clear_only=clear_only,
    )


def _show_device_code(message: str) -> None:
    console.print(Panel(message, title="[bold]Sign in[/bold]", border_style="cyan"))


def _print_info_panel(
    cfg: SyncConfig, synchronizer: VacationSynchronizer, operation: Text
) -> None:
    window = synchronizer.window
    info = Text()
    info.append("  Group:     ", style="bold")
    info.append(f"{cfg.group_name}\n")
    info.append("  Window:    ", style="bold")
    info.append(f"{format_graph_datetime(window.start)} → {format_graph_datetime(window.end)}\n")
    info.append("  Keywords:  ", style="bold")
    info.append(f"{', '.join(cfg.keywords)}\n")
    info.append("  Sign-in:   ", style="bold")
    info.append(f"{cfg.auth_mode.value}\n", style="cyan")
    info.append("  Operation: ", style="bold")
    info.append_text(operation)
    if cfg.dry_run:
        info.append("\n  Mode:      ")
        info.append("DRY RUN", style="bold magenta")

    console.print(Panel(info, title="[bold]Vacation Calendar Sync[/bold]"))


def _print_results(stats: SyncStats) -> None:
    results = Table.grid(padding=(0, 2))
    results.add_column(style="bold")
    results.add_column(justify="right")
    results.add_row("Deleted", str(stats.deleted))
    results.add_row("Created", str(stats.created))
    results.add_row("Members scanned", str(stats.members_scanned))
    results.add_row("Members skipped", str(stats.members_skipped))
    error_val = Text(str(stats.errors))
    if stats.errors == 0:
        error_val.append(" ✓", style="green")
    else:
        error_val.stylize("bold red")
    results.add_row("Errors", error_val)

    console.print(Panel(results, title="[bold]Results[/bold]", expand=False))
    if stats.failures:
        failed = Text()
        for item in stats.failures:
            failed.append(f"  • {item}\n")
        failed.rstrip()
        console.print(Panel(failed, title="[bold red]Failed[/bold red]", expand=False))


def _short_time(value: dict | None) -> str:
    """2026-11-02T00:00:00.0000000 → 2026-11-02 00:00"""
    return ((value or {}).get("dateTime") or "")[:16].replace("T", " ")


def _make_synchronizer(cfg: SyncConfig) -> VacationSynchronizer:
    if not run_preflight_checks(cfg, console):
        raise typer.Exit(1)
    client = build_client(cfg, prompt=_show_device_code)
    progress = ProgressReporter(console, verbose=cfg.verbose)
    return VacationSynchronizer(cfg, client=client, progress=progress)


def _run_sync(cfg: SyncConfig) -> None:
    """Core sync runner: display panel, confirm, run, show results."""
    synchronizer = _make_synchronizer(cfg)

    if cfg.clear_only:
        operation = Text("CLEAR (remove synced entries, no resync)", style="bold red")
    else:
        operation = Text("SYNC (remove synced entries then republish)", style="bold green")
    _print_info_panel(cfg, synchronizer, operation)

    # -- Confirmation --------------------------------------------------------
    if not cfg.yes and not cfg.dry_run:
        typer.confirm("Proceed?", abort=True)

    # -- Run -----------------------------------------------------------------
    try:
        stats = synchronizer.run()
    except CalendarSyncError as e:
        console.print(f"[bold red]Sync failed:[/] {e}")
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted by user[/]")
        raise typer.Exit(130) from None

    if stats.state == RunState.ABORTED:
        console.print("[bold red]Sync aborted:[/] see the log above for the cause")
        raise typer.Exit(1)

    _print_results(stats)

    # Per-item failures were logged above and do not change the exit status.
    if cfg.wait and cfg.auth_mode == AuthMode.INTERACTIVE:
        typer.pause("Press any key to exit...")


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

_GROUP_OPT = Annotated[
    str | None,
    typer.Option("--group", "-g", help="Display name of the group (overrides config)"),
]
_CLIENT_OPT = Annotated[
    str | None,
    typer.Option("--client-id", help="Application (client) ID of the app registration"),
]
_TENANT_OPT = Annotated[
    str | None,
    typer.Option("--tenant-id", help="Directory (tenant) ID"),
]
_KEYWORD_OPT = Annotated[
    list[str] | None,
    typer.Option(
        "--keyword",
        "-k",
        help="Subject keyword marking a vacation entry; repeat for several (overrides config)",
    ),
]
_AUTH_OPT = Annotated[
    AuthMode | None,
    typer.Option(
        "--auth",
        case_sensitive=False,
        help=(
            "Sign-in flow (default: device-code when RUNNING_IN_CONTAINER=true, "
            "interactive otherwise)"
        ),
    ),
]
_DRY_RUN = Annotated[bool, typer.Option("--dry-run", "-n", help="Preview changes without applying")]
_YES = Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")]
_NO_WAIT = Annotated[
    bool, typer.Option("--no-wait", help="Exit immediately instead of waiting for a keypress")
]


@app.command()
def sync(
    group: _GROUP_OPT = None,
    client_id: _CLIENT_OPT = None,
    tenant_id: _TENANT_OPT = None,
    keyword: _KEYWORD_OPT = None,
    auth: _AUTH_OPT = None,
    dry_run: _DRY_RUN = False,
    yes: _YES = False,
    no_wait: _NO_WAIT = False,
) -> None:
    """Remove previously synced vacation entries, then copy the current ones.

    Entries are taken from the personal calendars of all enabled members for
    the window [dim](one month back to six months ahead)[/dim].
    """
    _run_sync(
        _build_config(
            group,
            client_id,
            tenant_id,
            keyword,
            auth,
            dry_run=dry_run,
            yes=yes,
            wait=not no_wait,
        )
    )


@app.command()
def clear(
    group: _GROUP_OPT = None,
    client_id: _CLIENT_OPT = None,
    tenant_id: _TENANT_OPT = None,
    keyword: _KEYWORD_OPT = None,
    auth: _AUTH_OPT = None,
    dry_run: _DRY_RUN = False,
    yes: _YES = False,
    no_wait: _NO_WAIT = False,
) -> None:
    """Remove synced vacation entries from the group calendar without re-syncing."""
    _run_sync(
        _build_config(
            group,
            client_id,
            tenant_id,
            keyword,
            auth,
            dry_run=dry_run,
            yes=yes,
            wait=not no_wait,
            clear_only=True,
        )
    )


@app.command()
def scan(
    group: _GROUP_OPT = None,
    client_id: _CLIENT_OPT = None,
    tenant_id: _TENANT_OPT = None,
    keyword: _KEYWORD_OPT = None,
    auth: _AUTH_OPT = None,
) -> None:
    """List the vacation entries a sync would publish, without changing anything."""
    cfg = _build_config(group, client_id, tenant_id, keyword, auth)
    synchronizer = _make_synchronizer(cfg)

    try:
        events = synchronizer.discover()
    except CalendarSyncError as e:
        console.print(f"[bold red]Scan failed:[/] {e}")
        raise typer.Exit(1) from None

    if events is None:
        raise typer.Exit(1)

    if cfg.verbose:
        for event in events:
            dump_event(event, console)
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Shared subject", style="bold")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("All day")
    for event in events:
        table.add_row(
            EventSanitizer.shared_subject(event),
            _short_time(event.get("start")),
            _short_time(event.get("end")),
            "yes" if event.get("isAllDay") else "",
        )
    console.print(table)
    scanned = synchronizer.stats.members_scanned
    console.print(f"[dim]{len(events)} entries from {scanned} members[/]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
