"""
Microsoft Graph connectivity wrapper.
"""

import logging
from collections.abc import Iterable
from collections.abc import Iterator
from datetime import datetime
from datetime import timezone

import requests

from .models import DateWindow
from .models import GraphError

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_TIMEOUT = 30  # seconds, per request

USER_ODATA_TYPE = "#microsoft.graph.user"

_MEMBER_FIELDS = "id,displayName,mail,accountEnabled"
_EVENT_FIELDS = "id,subject,start,end,isAllDay,organizer,sensitivity"


def quote_odata(value: str) -> str:
    """Render ``value`` as an OData string literal (single quotes doubled)."""
    return "'" + value.replace("'", "''") + "'"


def format_graph_datetime(moment: datetime) -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-09-19T08:00:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def keyword_filter(keywords: Iterable[str]) -> str:
    """OR-combined ``contains(subject, ...)`` clauses."""
    clauses = [f"contains(subject,{quote_odata(k)})" for k in keywords]
    if not clauses:
        raise ValueError("At least one keyword is required")
    return " or ".join(clauses)


def window_filter(window: DateWindow) -> str:
    return (
        f"start/dateTime ge {quote_odata(format_graph_datetime(window.start))}"
        f" and end/dateTime le {quote_odata(format_graph_datetime(window.end))}"
    )


def _error_from_response(response: requests.Response, method: str, url: str) -> GraphError:
    code = None
    detail = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
        detail = body["error"].get("message")
    return GraphError(
        f"{method} {url} returned {response.status_code}: {detail or response.reason}",
        status=response.status_code,
        code=code,
        detail=detail,
    )


class PagedQuery:
    """A Graph collection query that follows ``@odata.nextLink`` lazily.

    Pages are only requested while the caller keeps iterating. Iterating the
    same query again starts over from the first page.
    """

    def __init__(self, client: "GraphClient", path: str, params: dict | None = None):
        self.client = client
        self.path = path
        self.params = params

    def pages(self) -> Iterator[list[dict]]:
        url = self.path
        params = self.params
        while url:
            data = self.client.request("GET", url, params=params) or {}
            yield data.get("value", [])
            # nextLink already embeds the original query string
            url = data.get("@odata.nextLink")
            params = None

    def __iter__(self) -> Iterator[dict]:
        for page in self.pages():
            yield from page


class GraphClient:
    """Wrapper for the Graph endpoints the vacation sync needs."""

    def __init__(
        self,
        token_provider,
        session: requests.Session | None = None,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def authenticate(self) -> None:
        """Acquire the first token up front so sign-in happens before any query."""
        self.token_provider.get_token()

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict | None:
        """Send one authenticated request and return the decoded JSON body (None if empty)."""
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.token_provider.get_token()}"}
        logger.debug("%s %s %s", method, url, params or "")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GraphError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise _error_from_response(response, method, url)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            # a proxy or gateway can answer 2xx with an HTML page
            raise GraphError(
                f"{method} {url} returned invalid JSON", status=response.status_code
            ) from e

    # ------------------------------------------------------------------ #
    # Directory                                                            #
    # ------------------------------------------------------------------ #

    def find_groups(self, display_name: str) -> list[dict]:
        """Return all groups whose display name equals ``display_name`` exactly."""
        query = PagedQuery(
            self,
            "/groups",
            {"$filter": f"displayName eq {quote_odata(display_name)}", "$select": "id,displayName"},
        )
        return list(query)

    def list_group_members(self, group_id: str) -> PagedQuery:
        return PagedQuery(self, f"/groups/{group_id}/members", {"$select": _MEMBER_FIELDS})

    def get_mailbox_settings(self) -> dict:
        return self.request("GET", "/me/mailboxSettings") or {}

    # ------------------------------------------------------------------ #
    # Calendars                                                            #
    # ------------------------------------------------------------------ #

    def list_calendar_view(
        self, user_id: str, window: DateWindow, keywords: Iterable[str]
    ) -> PagedQuery:
        """Vacation events in a user's calendar, recurring series expanded to occurrences."""
        return PagedQuery(
            self,
            f"/users/{user_id}/calendar/calendarView",
            {
                "startDateTime": format_graph_datetime(window.start),
                "endDateTime": format_graph_datetime(window.end),
                "$filter": keyword_filter(keywords),
                "$select": _EVENT_FIELDS,
            },
        )

    def list_group_events(
        self, group_id: str, window: DateWindow, keywords: Iterable[str]
    ) -> PagedQuery:
        """Vacation events in the group calendar lying entirely inside ``window``."""
        return PagedQuery(
            self,
            f"/groups/{group_id}/calendar/events",
            {
                "$filter": f"({keyword_filter(keywords)}) and {window_filter(window)}",
                "$select": _EVENT_FIELDS,
            },
        )

    def create_group_event(self, group_id: str, payload: dict) -> dict:
        return self.request("POST", f"/groups/{group_id}/calendar/events", json=payload) or {}

    def delete_group_event(self, group_id: str, event_id: str) -> None:
        self.request("DELETE", f"/groups/{group_id}/calendar/events/{event_id}")
