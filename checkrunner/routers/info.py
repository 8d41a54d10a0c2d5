"""Ruter Ingfo"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from checkrunner.config import settings
from checkrunner.db import get_db
from checkrunner.models import EventDelivery
from checkrunner.runtime import get_event_router
from checkrunner.schemas import CheckInfo
from checkrunner.services.events import Event
from checkrunner.services.router import EventRouter
from checkrunner.timezone import format_local

router = APIRouter(tags=["info"])

HTTP_HELP_TEXT = dedent(
    f"""
checkrunner (HTTP Help)

Endpoints
---------
- GET  /                 : Health check
- GET  /help             : This text
- GET  /checks           : Registered check runs
- GET  /deliveries       : Recent events and their status
- POST /webhook          : GitHub webhook (check_suite, check_run, push, issue_comment)
- POST /trigger/{{event}} : exec, publish, publish-examples, test-integration (X-Admin-Key)

Notes
-----
- Project: {settings.project_name} (mainline branch: {settings.mainline_branch})
- Comment "{settings.comment_trigger}" on a pull request to re-run the suite.
- Run: uvicorn checkrunner.app:app --host 0.0.0.0 --port 8000
"""
).strip()


@router.get("/", response_class=PlainTextResponse)
def root():
    return "ok"


@router.get("/help", response_class=PlainTextResponse)
def help_text():
    return HTTP_HELP_TEXT


@router.get("/checks", response_model=list[CheckInfo])
def list_checks(event_router: EventRouter = Depends(get_event_router)):
    """Registry entries, in the order a suite runs them."""
    project = event_router.project
    listing = Event(type="info")
    return [
        CheckInfo(
            id=entry.id,
            description=entry.description,
            job=entry.builder(listing, project).name,
        )
        for entry in event_router.registry.entries()
    ]


@router.get("/deliveries")
def list_deliveries(
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(EventDelivery)
        .order_by(EventDelivery.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "build_id": row.build_id,
            "event_type": row.event_type,
            "source": row.source,
            "ref": row.ref,
            "commit": row.commit,
            "status": row.status,
            "action": row.action,
            "summary": row.summary,
            "error": row.error_message,
            "created_at": format_local(row.created_at),
            "finished_at": format_local(row.finished_at),
            "checks": [
                {"name": check.check_name, "conclusion": check.conclusion}
                for check in row.checks
            ],
        }
        for row in rows
    ]
