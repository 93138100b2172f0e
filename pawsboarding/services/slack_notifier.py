from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Any, Optional

import httpx

from pawsboarding.core.errors import NotificationFailure
from pawsboarding.models.booking_request import BookingRequest
from pawsboarding.services.booking_rules import DateRange, format_date_range

logger = logging.getLogger(__name__)

SIGNATURE_MAX_AGE_SECONDS = 300


def build_approval_blocks(booking: BookingRequest, availability_message: str) -> list[dict[str, Any]]:
    dates = format_date_range(DateRange(booking.start_date, booking.end_date))
    fields = [
        f"*Parent:* {booking.parent_name}",
        f"*Dog:* {booking.dog_name}",
        f"*Email:* {booking.email}",
        f"*Phone:* {booking.phone or 'Not provided'}",
        f"*Dates:* {dates}",
        f"*Breed:* {booking.dog_breed or 'Not specified'}",
    ]
    return [
        {"type": "header", "text": {"type": "plain_text", "text": "🐕 New Boarding Request"}},
        {"type": "section", "fields": [{"type": "mrkdwn", "text": f} for f in fields]},
        {"type": "section", "text": {"type": "mrkdwn", "text": f"*Calendar Availability:*\n{availability_message}"}},
        {"type": "divider"},
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "✅ Approve"},
                    "style": "primary",
                    "action_id": "approve_booking",
                    "value": booking.id,
                },
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "❌ Deny"},
                    "style": "danger",
                    "action_id": "deny_booking",
                    "value": booking.id,
                },
            ],
        },
    ]


class SlackNotifier:
    """Posts approval requests to a Slack channel through the Web API.

    When no bot token or channel is configured the notifier is disabled and
    every call is a logged no-op.
    """

    def __init__(
        self,
        bot_token: str,
        channel_id: str,
        *,
        base_url: str = "https://slack.com/api",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.channel_id)

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.bot_token}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(f"{self.base_url}/{method}", json=payload, headers=headers)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NotificationFailure(f"Slack {method} failed: {exc}") from exc

        if not data.get("ok"):
            raise NotificationFailure(f"Slack {method} failed: {data.get('error', 'unknown_error')}")
        return data

    async def post_approval_request(self, booking: BookingRequest, availability_message: str) -> str | None:
        if not self.enabled:
            logger.info("Slack not configured; skipping approval request for booking %s", booking.id)
            return None

        data = await self._call(
            "chat.postMessage",
            {
                "channel": self.channel_id,
                "text": f"New boarding request from {booking.parent_name} for {booking.dog_name}",
                "blocks": build_approval_blocks(booking, availability_message),
            },
        )
        return data.get("ts")

    async def update_approval_message(self, message_ts: str, status: str, approver: str | None = None) -> None:
        if not self.enabled:
            return

        approved = status.upper() == "APPROVED"
        emoji = "✅" if approved else "❌"
        label = "APPROVED" if approved else "DENIED"
        by = f" by {approver}" if approver else ""
        await self._call(
            "chat.update",
            {
                "channel": self.channel_id,
                "ts": message_ts,
                "text": f"Booking request {label}{by}",
                "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": f"{emoji} *{label}*{by}"}}],
            },
        )


def verify_slack_signature(
    body: str,
    signature: str,
    timestamp: str,
    *,
    signing_secret: str,
    now: float | None = None,
) -> bool:
    if not signing_secret or not signature or not timestamp:
        return False
    try:
        ts = int(timestamp)
    except ValueError:
        return False

    current = time.time() if now is None else now
    if abs(current - ts) > SIGNATURE_MAX_AGE_SECONDS:
        return False

    digest = hmac.new(signing_secret.encode("utf-8"), f"v0:{timestamp}:{body}".encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"v0={digest}", signature)
