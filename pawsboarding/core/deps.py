from __future__ import annotations

import logging
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import Depends

from pawsboarding.core.config import get_settings
from pawsboarding.db.session import SessionLocal
from pawsboarding.services.availability_service import AvailabilityEngine
from pawsboarding.services.calendar_gateway import CalendarGateway, GoogleCalendarGateway, load_service_account_credentials
from pawsboarding.services.slack_notifier import SlackNotifier

logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_calendar_credentials():
    """Service-account credentials shared across requests so the access token is reused until it expires."""
    settings = get_settings()
    try:
        return load_service_account_credentials(
            service_account_file=settings.google_service_account_file,
            client_email=settings.google_service_account_email,
            private_key=settings.google_private_key,
        )
    except (OSError, ValueError):
        # Calendar calls then go out unauthenticated and are denied upstream
        logger.exception("Could not load Google service account credentials")
        return None


def get_calendar_gateway() -> CalendarGateway:
    settings = get_settings()
    return GoogleCalendarGateway(
        settings.google_calendar_id,
        tz=ZoneInfo(settings.timezone),
        credentials=get_calendar_credentials(),
        api_key=settings.google_api_key,
        access_token=settings.google_access_token,
        base_url=settings.google_calendar_base_url,
        timeout=settings.calendar_timeout_seconds,
    )


def get_availability_engine(gateway: CalendarGateway = Depends(get_calendar_gateway)) -> AvailabilityEngine:
    settings = get_settings()
    return AvailabilityEngine(gateway, tz=ZoneInfo(settings.timezone), max_horizon_months=settings.blackout_max_months)


def get_notifier() -> SlackNotifier:
    settings = get_settings()
    return SlackNotifier(
        settings.slack_bot_token,
        settings.slack_channel_id,
        base_url=settings.slack_base_url,
        timeout=settings.slack_timeout_seconds,
    )
