"""GitHub webhook endpoint."""

from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from checkrunner.config import settings
from checkrunner.db import SessionLocal
from checkrunner.models import IGNORED
from checkrunner.runtime import get_event_router
from checkrunner.services.deliveries import process_event, record_delivery
from checkrunner.services.github import to_event
from checkrunner.services.router import EventRouter
from checkrunner.utils import gh_verify

router = APIRouter(tags=["github"])


@router.post("/webhook", response_class=PlainTextResponse)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    event_router: EventRouter = Depends(get_event_router),
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
    x_github_delivery: str | None = Header(None),
):
    """
    GitHub webhook endpoint.

    When `GITHUB_WEBHOOK_SECRET` is set the payload signature is validated
    against `X-Hub-Signature-256`. Accepted deliveries are recorded and routed
    in the background; the response only says whether anything will run.
    """
    body = await request.body()
    if settings.github_webhook_secret and not gh_verify(
        settings.github_webhook_secret, body, x_hub_signature_256
    ):
        raise HTTPException(401, "Invalid signature")
    if not x_github_event:
        raise HTTPException(400, "Missing X-GitHub-Event header")

    try:
        payload = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(400, "Payload is not valid JSON") from None

    event = to_event(x_github_event, payload, x_github_delivery)
    with SessionLocal() as db:
        delivery = record_delivery(db, event)
        if not event_router.handles(event.type):
            delivery.status = IGNORED
            db.commit()
            return "ignored"
        delivery_id = delivery.id

    background_tasks.add_task(process_event, event_router, event, delivery_id, SessionLocal)
    return f"{event.type} accepted as {event.build_id}"
