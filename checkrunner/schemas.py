"""Request/response schemas"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class TriggerRequest(BaseModel):
    """Body of a manual trigger. Both fields may be omitted."""

    ref: str = ""
    commit: str = ""
    payload: Optional[dict] = None


class CheckInfo(BaseModel):
    id: str
    description: str
    job: str
