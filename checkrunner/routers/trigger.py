"""Manually triggered events."""

from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException
from fastapi.responses import PlainTextResponse

from checkrunner.config import settings
from checkrunner.db import SessionLocal
from checkrunner.runtime import get_event_router
from checkrunner.schemas import TriggerRequest
from checkrunner.services.deliveries import process_event, record_delivery
from checkrunner.services.events import Event, Revision
from checkrunner.services.github import new_build_id
from checkrunner.services.router import EventRouter
from checkrunner.utils import admin_key_ok

router = APIRouter(prefix="/trigger", tags=["trigger"])

MANUAL_EVENTS = frozenset({"exec", "publish", "publish-examples", "test-integration"})


@router.post("/{event_name}", response_class=PlainTextResponse)
async def trigger(
    event_name: str,
    background_tasks: BackgroundTasks,
    body: TriggerRequest | None = None,
    event_router: EventRouter = Depends(get_event_router),
    x_admin_key: str | None = Header(None),
):
    """Queue one of the manual events; requires `X-Admin-Key`."""
    if not admin_key_ok(settings.admin_http_key, x_admin_key):
        raise HTTPException(401, "Invalid admin key")
    if event_name not in MANUAL_EVENTS:
        raise HTTPException(404, f"Unknown event: {event_name}")

    body = body or TriggerRequest()
    event = Event(
        type=event_name,
        revision=Revision(ref=body.ref, commit=body.commit),
        payload=json.dumps({"body": body.payload or {}}),
        build_id=new_build_id(),
    )
    with SessionLocal() as db:
        delivery_id = record_delivery(db, event, source="manual").id

    background_tasks.add_task(process_event, event_router, event, delivery_id, SessionLocal)
    return f"{event_name} accepted as {event.build_id}"
