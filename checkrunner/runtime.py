"""Process-wide wiring: settings -> project, executor and event router."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from checkrunner.config import Settings
from checkrunner.services.dispatch import DispatchContext
from checkrunner.services.events import project_from_settings
from checkrunner.services.executor import HttpJobExecutor, JobExecutor
from checkrunner.services.router import EventRouter


def build_router(settings: Settings, executor: Optional[JobExecutor] = None) -> EventRouter:
    ctx = DispatchContext(
        project=project_from_settings(settings),
        executor=executor or HttpJobExecutor(settings.executor_url, settings.executor_token),
        notification_image=settings.notification_image,
        details_url_template=settings.details_url_template,
    )
    return EventRouter(ctx, comment_trigger=settings.comment_trigger)


def get_event_router(request: Request) -> EventRouter:
    """FastAPI dependency: the router built at startup."""
    return request.app.state.event_router
