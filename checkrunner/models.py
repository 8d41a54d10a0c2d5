"""models for DBs"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base
from .timezone import now_local

RECEIVED = "received"
ROUTED = "routed"
IGNORED = "ignored"
ERROR = "error"


class EventDelivery(Base):
    """Inbound events (GitHub webhooks and manual triggers)."""

    __tablename__ = "event_deliveries"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=now_local, index=True)
    build_id = Column(String, index=True)
    event_type = Column(String, index=True)
    source = Column(String, default="github")
    ref = Column(String, default="")
    commit = Column(String, default="")
    status = Column(String, default=RECEIVED, index=True)
    action = Column(String, default="")
    summary = Column(Text, default="")
    payload = Column(Text, default="")
    error_message = Column(Text, nullable=True)
    finished_at = Column(DateTime, nullable=True)

    checks = relationship("CheckRunLog", back_populates="delivery", cascade="all,delete")


class CheckRunLog(Base):
    """Outcome of one wrapped check run."""

    __tablename__ = "check_run_logs"

    id = Column(Integer, primary_key=True)
    delivery_id = Column(Integer, ForeignKey("event_deliveries.id"), index=True)
    check_name = Column(String, index=True)
    conclusion = Column(String, default="")
    job_error = Column(Text, nullable=True)
    notify_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=now_local)

    delivery = relationship("EventDelivery", back_populates="checks")
