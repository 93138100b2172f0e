from __future__ import annotations

import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from pawsboarding.core.config import get_settings
from pawsboarding.core.deps import get_db, get_notifier
from pawsboarding.core.errors import NotificationFailure
from pawsboarding.services.booking_policy import BookingStatus
from pawsboarding.services.booking_service import update_booking_status
from pawsboarding.services.slack_notifier import SlackNotifier, verify_slack_signature

logger = logging.getLogger(__name__)

router = APIRouter()

ACTION_STATUS = {
    "approve_booking": BookingStatus.APPROVED,
    "deny_booking": BookingStatus.DENIED,
}


@router.post("/interactions")
async def slack_interactions(
    request: Request,
    db: Session = Depends(get_db),
    notifier: SlackNotifier = Depends(get_notifier),
):
    raw = (await request.body()).decode("utf-8")
    ok = verify_slack_signature(
        raw,
        request.headers.get("x-slack-signature", ""),
        request.headers.get("x-slack-request-timestamp", ""),
        signing_secret=get_settings().slack_signing_secret,
    )
    if not ok:
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(parse_qs(raw).get("payload", [""])[0])
        action = payload["actions"][0]
    except (ValueError, KeyError, IndexError, TypeError):
        raise HTTPException(status_code=400, detail="Malformed interaction payload")

    status = ACTION_STATUS.get(action.get("action_id", ""))
    if status is None:
        return {"ok": True}

    user = payload.get("user") or {}
    approver = user.get("name") or user.get("username") or user.get("id") or ""
    booking = update_booking_status(db, booking_id=action.get("value", ""), status=status, decided_by=approver)

    message_ts = booking.slack_message_ts or (payload.get("container") or {}).get("message_ts")
    if message_ts:
        try:
            await notifier.update_approval_message(message_ts, status.value, approver or None)
        except NotificationFailure as exc:
            logger.error("Could not update Slack message for booking %s: %s", booking.id, exc.message)

    return {"ok": True, "bookingId": booking.id, "status": booking.status}
