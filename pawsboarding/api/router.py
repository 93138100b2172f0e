from __future__ import annotations

from fastapi import APIRouter

from pawsboarding.api.routes import public, slack

api_router = APIRouter()

api_router.include_router(public.router, tags=["public"])
api_router.include_router(slack.router, prefix="/slack", tags=["slack"])
