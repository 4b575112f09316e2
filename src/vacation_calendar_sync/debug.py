"""
Console helpers for inspecting Graph events and reporting progress.

Importable functions:
  describe_event(event)  — one-line summary used in verbose logs
  dump_event(event, console)  — render one event in a Rich Panel
  ProgressReporter  — per-item lines in verbose mode, dots otherwise
"""

import json
import logging

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from vacation_calendar_sync.sanitizer import EventSanitizer

logger = logging.getLogger(__name__)


def describe_event(event: dict) -> str:
    start = (event.get("start") or {}).get("dateTime", "?")
    end = (event.get("end") or {}).get("dateTime", "?")
    line = f"{event.get('subject')} ({EventSanitizer.organizer_name(event)}) {start} - {end}"
    if event.get("id"):
        line += f" ({event['id']})"
    return line


def dump_event(event: dict, console: Console) -> None:
    """Render one event's header fields plus its raw JSON."""
    header = Text()
    header.append("Subject:     ", style="bold")
    header.append(f"{event.get('subject')}\n")
    header.append("Organizer:   ", style="bold")
    header.append(
        f"{EventSanitizer.organizer_name(event)} <{EventSanitizer.organizer_address(event)}>\n"
    )
    header.append("All day:     ", style="bold")
    header.append(f"{bool(event.get('isAllDay'))}\n")
    header.append("Sensitivity: ", style="bold")
    header.append(str(event.get("sensitivity")))

    console.print(Panel(header, title="[bold]Event[/bold]"))
    console.print(Syntax(json.dumps(event, indent=2, default=str), "json", word_wrap=True))


class ProgressReporter:
    """Verbose mode logs every item; otherwise a dot is printed per item."""

    def __init__(self, console: Console, verbose: bool = False):
        self.console = console
        self.verbose = verbose
        self._dots = 0

    def item(self, message: str) -> None:
        if self.verbose:
            logger.info(message)
        else:
            self.console.print(".", end="")
            self._dots += 1

    def finish(self) -> None:
        if self._dots:
            self.console.print()
            self._dots = 0
