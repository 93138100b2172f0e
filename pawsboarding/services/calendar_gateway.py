from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Protocol
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from pawsboarding.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

UNREADABLE_EVENT = "Calendar returned an unreadable event"
ACCESS_DENIED = "Calendar access denied - check calendar sharing/credentials"


@dataclass(frozen=True)
class BusyInterval:
    """An occupied span normalised to inclusive calendar days in the facility timezone."""

    first_day: date
    last_day: date
    label: str
    all_day: bool = False

    def overlaps(self, start: date, end: date) -> bool:
        # [start, end) against the inclusive span [first_day, last_day]
        return self.first_day < end and self.last_day >= start


class CalendarGateway(Protocol):
    async def list_busy_intervals(self, window_start: date, window_end: date) -> list[BusyInterval]: ...


def load_service_account_credentials(
    *,
    service_account_file: str = "",
    client_email: str = "",
    private_key: str = "",
) -> Optional[service_account.Credentials]:
    """Build read-only Calendar credentials for a service account.

    Either a JSON key file, or the client email plus the PEM private key
    (escaped ``\\n`` sequences from env files are turned into newlines).
    Returns None when neither is configured.
    """
    if service_account_file:
        return service_account.Credentials.from_service_account_file(service_account_file, scopes=CALENDAR_SCOPES)
    if client_email and private_key:
        info = {
            "type": "service_account",
            "client_email": client_email,
            "private_key": private_key.replace("\\n", "\n"),
            "token_uri": GOOGLE_TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=CALENDAR_SCOPES)
    return None


def local_midnight_utc(d: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(d, time.min).replace(tzinfo=tz).astimezone(UTC)


def _parse_instant(value: str, tz: ZoneInfo) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"dateTime must be a string, got {type(value).__name__}")
    # Google returns RFC3339; older Pythons do not accept a trailing "Z"
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def busy_interval_from_event(event: dict[str, Any], tz: ZoneInfo) -> BusyInterval | None:
    """Normalise one Google Calendar event resource.

    All-day events carry an exclusive ``end.date``; it becomes the inclusive
    last day. Timed events are truncated to local dates in ``tz``; an event
    that ends exactly at local midnight does not occupy the following day.
    Returns None for cancelled events. Raises ValueError for anything that is
    not shaped like an event resource.
    """
    if not isinstance(event, dict):
        raise ValueError(f"event must be an object, got {type(event).__name__}")
    if event.get("status") == "cancelled":
        return None

    label = event.get("summary") or "Unnamed event"
    start = event.get("start") or {}
    end = event.get("end") or {}
    if not isinstance(start, dict) or not isinstance(end, dict):
        raise ValueError("event start/end must be objects")

    if "date" in start:
        first_day = date.fromisoformat(start["date"])
        end_day = date.fromisoformat(end["date"]) if "date" in end else first_day + timedelta(days=1)
        last_day = max(first_day, end_day - timedelta(days=1))
        return BusyInterval(first_day=first_day, last_day=last_day, label=str(label), all_day=True)

    start_local = _parse_instant(start["dateTime"], tz)
    end_local = _parse_instant(end["dateTime"], tz) if "dateTime" in end else start_local
    last_day = end_local.date()
    if end_local > start_local and end_local.time() == time.min:
        last_day = last_day - timedelta(days=1)
    return BusyInterval(first_day=start_local.date(), last_day=max(start_local.date(), last_day), label=str(label))


class GoogleCalendarGateway:
    """Reads busy events from a Google Calendar (v3 ``events.list``).

    Auth, in order of preference: service-account credentials (refreshed
    when expired and sent as a bearer token), a static OAuth bearer token,
    and an API key for publicly shared calendars. Each call is a single
    logical query: pages are followed until ``nextPageToken`` runs out.
    No retries.
    """

    def __init__(
        self,
        calendar_id: str,
        *,
        tz: ZoneInfo,
        credentials: Any = None,
        api_key: str = "",
        access_token: str = "",
        base_url: str = "https://www.googleapis.com/calendar/v3",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.calendar_id = calendar_id
        self.tz = tz
        self.credentials = credentials
        self.api_key = api_key
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _events_url(self) -> str:
        return f"{self.base_url}/calendars/{quote(self.calendar_id, safe='@')}/events"

    async def _auth_headers(self) -> dict[str, str]:
        if self.credentials is not None:
            if not self.credentials.valid:
                try:
                    # google-auth refreshes synchronously
                    await asyncio.to_thread(self.credentials.refresh, GoogleAuthRequest())
                except GoogleAuthError as exc:
                    logger.warning("Service account token refresh failed: %s", exc)
                    raise UpstreamUnavailable(ACCESS_DENIED) from exc
            return {"Authorization": f"Bearer {self.credentials.token}"}
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    async def list_busy_intervals(self, window_start: date, window_end: date) -> list[BusyInterval]:
        if not self.calendar_id:
            raise UpstreamUnavailable("Calendar not configured - set GOOGLE_CALENDAR_ID")

        params: dict[str, Any] = {
            "timeMin": local_midnight_utc(window_start, self.tz).isoformat(),
            "timeMax": local_midnight_utc(window_end, self.tz).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 2500,
        }
        if self.api_key:
            params["key"] = self.api_key
        headers = await self._auth_headers()

        logger.info("Fetching busy events %s..%s", window_start, window_end)

        items: list[Any] = []
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                while True:
                    r = await client.get(self._events_url(), params=params, headers=headers)
                    r.raise_for_status()
                    data = r.json()
                    if not isinstance(data, dict) or not isinstance(data.get("items") or [], list):
                        logger.warning("Calendar returned a %s body instead of an events page", type(data).__name__)
                        raise UpstreamUnavailable(UNREADABLE_EVENT)
                    items.extend(data.get("items") or [])
                    page_token = data.get("nextPageToken")
                    if not page_token:
                        break
                    params["pageToken"] = page_token
        except httpx.TimeoutException as exc:
            logger.warning("Calendar request timed out after %ss", self.timeout)
            raise UpstreamUnavailable("Calendar check timed out - please try again") from exc
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            logger.warning("Calendar request failed with HTTP %s", code)
            if code == 404:
                raise UpstreamUnavailable("Calendar not found - check GOOGLE_CALENDAR_ID configuration") from exc
            if code in (401, 403):
                raise UpstreamUnavailable(ACCESS_DENIED) from exc
            raise UpstreamUnavailable("Calendar check failed - please try again") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Calendar request failed: %s", exc)
            raise UpstreamUnavailable("Calendar check failed - please try again") from exc

        intervals: list[BusyInterval] = []
        for event in items:
            try:
                interval = busy_interval_from_event(event, self.tz)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Calendar event could not be read: %s", exc)
                raise UpstreamUnavailable(UNREADABLE_EVENT) from exc
            if interval is not None:
                intervals.append(interval)
        return intervals
