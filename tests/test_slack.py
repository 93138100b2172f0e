import hashlib
import hmac
import json
import time
from datetime import date, timedelta
from urllib.parse import urlencode

import httpx
import pytest

from conftest import facility_today
from pawsboarding.core.errors import NotificationFailure
from pawsboarding.models.booking_request import BookingRequest
from pawsboarding.services.slack_notifier import SlackNotifier, build_approval_blocks, verify_slack_signature

SECRET = "test-signing-secret"


def sign(body: str, ts: str, secret: str = SECRET) -> str:
    return "v0=" + hmac.new(secret.encode(), f"v0:{ts}:{body}".encode(), hashlib.sha256).hexdigest()


def make_booking(**overrides) -> BookingRequest:
    fields = dict(
        id="b-1",
        parent_name="Sam Rivera",
        email="sam@example.com",
        phone=None,
        dog_name="Biscuit",
        dog_breed=None,
        start_date=date(2024, 6, 7),
        end_date=date(2024, 6, 10),
        status="PENDING",
    )
    fields.update(overrides)
    return BookingRequest(**fields)


class TestSignature:
    def test_valid_signature(self):
        ts = "1700000000"
        assert verify_slack_signature("a=b", sign("a=b", ts), ts, signing_secret=SECRET, now=1700000010)

    def test_tampered_body(self):
        ts = "1700000000"
        assert not verify_slack_signature("a=c", sign("a=b", ts), ts, signing_secret=SECRET, now=1700000010)

    def test_stale_timestamp(self):
        ts = "1700000000"
        assert not verify_slack_signature("a=b", sign("a=b", ts), ts, signing_secret=SECRET, now=1700000301)

    def test_missing_secret_or_headers(self):
        assert not verify_slack_signature("a=b", "", "1700000000", signing_secret=SECRET)
        assert not verify_slack_signature("a=b", "v0=x", "not-a-number", signing_secret=SECRET)
        assert not verify_slack_signature("a=b", "v0=x", "1700000000", signing_secret="")


def test_approval_blocks_carry_booking_id():
    blocks = build_approval_blocks(make_booking(), "✅ Available: Jun 7, 2024 - Jun 10, 2024")
    buttons = blocks[-1]["elements"]
    assert [(b["action_id"], b["value"]) for b in buttons] == [("approve_booking", "b-1"), ("deny_booking", "b-1")]
    fields = [f["text"] for f in blocks[1]["fields"]]
    assert "*Dates:* Jun 7, 2024 - Jun 10, 2024" in fields
    assert "*Breed:* Not specified" in fields


@pytest.mark.asyncio
async def test_post_approval_request_returns_ts():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "ts": "1700000000.000100"})

    notifier = SlackNotifier("xoxb-test", "C123", transport=httpx.MockTransport(handler))
    ts = await notifier.post_approval_request(make_booking(), "ok")

    assert ts == "1700000000.000100"
    assert seen[0].url.path == "/api/chat.postMessage"
    assert seen[0].headers["authorization"] == "Bearer xoxb-test"
    assert json.loads(seen[0].content)["channel"] == "C123"


@pytest.mark.asyncio
async def test_slack_error_raises_notification_failure():
    notifier = SlackNotifier(
        "xoxb-test", "C123", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"ok": False, "error": "channel_not_found"}))
    )
    with pytest.raises(NotificationFailure) as exc:
        await notifier.post_approval_request(make_booking(), "ok")
    assert "channel_not_found" in exc.value.message


@pytest.mark.asyncio
async def test_unconfigured_notifier_is_a_no_op():
    def handler(request):
        raise AssertionError("no request expected")

    notifier = SlackNotifier("", "", transport=httpx.MockTransport(handler))
    assert await notifier.post_approval_request(make_booking(), "ok") is None
    await notifier.update_approval_message("1.2", "APPROVED")


def interaction(client, action_id: str, booking_id: str, ts: str | None = None):
    payload = {
        "type": "block_actions",
        "user": {"id": "U1", "name": "casey"},
        "container": {"message_ts": "1700000000.000001"},
        "actions": [{"action_id": action_id, "value": booking_id}],
    }
    body = urlencode({"payload": json.dumps(payload)})
    ts = ts or str(int(time.time()))
    return client.post(
        "/api/slack/interactions",
        content=body,
        headers={
            "content-type": "application/x-www-form-urlencoded",
            "x-slack-request-timestamp": ts,
            "x-slack-signature": sign(body, ts),
        },
    )


def pending_booking(db_session) -> BookingRequest:
    start = facility_today() + timedelta(days=30)
    b = BookingRequest(
        parent_name="Sam Rivera",
        email="sam@example.com",
        dog_name="Biscuit",
        start_date=start,
        end_date=start + timedelta(days=2),
        status="PENDING",
        slack_message_ts="1700000000.000001",
    )
    db_session.add(b)
    db_session.commit()
    return b


def test_approve_interaction(client, db_session, notifier):
    booking = pending_booking(db_session)

    r = interaction(client, "approve_booking", booking.id)
    assert r.status_code == 200
    assert r.json()["status"] == "APPROVED"

    db_session.refresh(booking)
    assert booking.status == "APPROVED"
    assert booking.decided_by == "casey"
    assert notifier.updated == [("1700000000.000001", "APPROVED", "casey")]

    # already decided
    assert interaction(client, "deny_booking", booking.id).status_code == 409


def test_deny_interaction(client, db_session):
    booking = pending_booking(db_session)
    assert interaction(client, "deny_booking", booking.id).json()["status"] == "DENIED"


def test_interaction_with_bad_signature_is_rejected(client, db_session):
    booking = pending_booking(db_session)
    r = client.post(
        "/api/slack/interactions",
        content="payload=%7B%7D",
        headers={"x-slack-request-timestamp": str(int(time.time())), "x-slack-signature": "v0=bad"},
    )
    assert r.status_code == 401
    db_session.refresh(booking)
    assert booking.status == "PENDING"


def test_unknown_action_is_ignored(client, db_session):
    booking = pending_booking(db_session)
    assert interaction(client, "open_modal", booking.id).json() == {"ok": True}
