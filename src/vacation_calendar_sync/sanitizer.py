"""
Event sanitization — builds the shared-calendar copy of a personal event.

Only the subject (tagged with the organizer's name) and the start/end times
are carried over. Body, location, attendees, reminders and categories of the
personal event never reach the group calendar.
"""

import copy


class EventSanitizer:
    """Turns a personal Graph event into a payload for the group calendar."""

    @staticmethod
    def organizer_name(event: dict) -> str:
        organizer = event.get("organizer") or {}
        return (organizer.get("emailAddress") or {}).get("name") or ""

    @staticmethod
    def organizer_address(event: dict) -> str:
        organizer = event.get("organizer") or {}
        return (organizer.get("emailAddress") or {}).get("address") or ""

    @classmethod
    def shared_subject(cls, event: dict) -> str:
        return f"{event.get('subject') or ''} ({cls.organizer_name(event)})"

    @classmethod
    def sanitize(cls, event: dict, org_timezone: str | None = None) -> dict:
        """
        Build the create payload for the shared calendar.

        Args:
            event: Graph event from a member's personal calendar (not modified)
            org_timezone: The organization's default timezone (mailbox settings)

        Returns:
            Dict with ``subject``, ``start`` and ``end`` ready to POST

        All-day events from personal calendars may carry a floating timezone;
        copying that verbatim shifts them by a day in the group calendar, so
        both ends are pinned to ``org_timezone``.
        """
        start = copy.deepcopy(event.get("start") or {})
        end = copy.deepcopy(event.get("end") or {})

        if org_timezone and event.get("isAllDay"):
            start["timeZone"] = org_timezone
            end["timeZone"] = org_timezone

        return {
            "subject": cls.shared_subject(event),
            "start": start,
            "end": end,
        }
