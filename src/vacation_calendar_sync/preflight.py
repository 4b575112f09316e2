"""
Preflight checks run before sign-in to catch common misconfigurations early.
"""

import logging
import re

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from vacation_calendar_sync.models import SyncConfig

logger = logging.getLogger(__name__)

_GUID_RE = re.compile(r"^[0-9a-fA-F]{8}-([0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def check_config(cfg: SyncConfig) -> list[tuple[str, str, str]]:
    """Return (label, detail, hint) for every problem found in ``cfg``."""
    issues: list[tuple[str, str, str]] = []

    for value, label, key in (
        (cfg.client_id, "Client ID", "client_id"),
        (cfg.tenant_id, "Tenant ID", "tenant_id"),
    ):
        if not _GUID_RE.match(value or ""):
            logger.error("%s is not a GUID: %r", label, value)
            issues.append(
                (
                    label,
                    f"not a GUID: {value!r}",
                    f"Set [cyan]{key}[/] in the config file or pass --{key.replace('_', '-')}",
                )
            )

    if not (cfg.group_name or "").strip():
        issues.append(("Group", "no group name configured", "Pass --group or set group_name"))

    if not cfg.keywords:
        issues.append(
            ("Keywords", "keyword list is empty", "Pass --keyword or set keywords")
        )
    for keyword in cfg.keywords:
        if not keyword.strip() or _CONTROL_RE.search(keyword):
            issues.append(
                (
                    "Keywords",
                    f"unusable keyword {keyword!r}",
                    "Keywords must be non-blank and free of control characters",
                )
            )

    return issues


def run_preflight_checks(cfg: SyncConfig, console: Console) -> bool:
    """Return True if sync may proceed; print issues and return False otherwise."""
    issues = check_config(cfg)
    if issues:
        _print_issues(issues, console)
        return False
    return True


def _print_issues(issues: list[tuple[str, str, str]], console: Console) -> None:
    body = Text()
    for i, (label, detail, hint) in enumerate(issues):
        if i:
            body.append("\n")
        body.append(f"  ✗  {label}: ", style="bold red")
        body.append(detail, style="bold red")
        body.append("\n       → ", style="yellow")
        body.append_text(Text.from_markup(hint, style="yellow"))

    console.print(Panel(body, title="[bold red]Preflight checks failed[/bold red]"))
