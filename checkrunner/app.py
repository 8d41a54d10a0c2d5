"""the beautiful world start from here."""

from __future__ import annotations

from fastapi import FastAPI

from checkrunner.config import settings
from checkrunner.db import Base, engine
from checkrunner.logging_utils import configure_logging
from checkrunner.routers import gh, info, trigger
from checkrunner.runtime import build_router

configure_logging(settings.log_level)
Base.metadata.create_all(engine)

app = FastAPI(title="GitHub check runs → containerized jobs")
app.state.event_router = build_router(settings)

app.include_router(info.router)
app.include_router(gh.router)
app.include_router(trigger.router)
