"""Translation of GitHub webhook deliveries into router events."""

from __future__ import annotations

import json
import uuid
from typing import Any, Callable, Mapping, Optional, Sequence

from checkrunner.services.events import HEAD_PREFIX, Event, Revision

RevisionFn = Callable[[Mapping[str, Any]], Revision]

UNKNOWN = "unknown"

# Events routed as "<event>:<action>"; the rest keep the bare event name.
ACTION_EVENTS = frozenset({"check_suite", "check_run", "issue_comment", "pull_request"})


def _dig(data: Any, path: Sequence[str]) -> Any:
    current = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def _ensure_mapping(payload: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return payload if isinstance(payload, Mapping) else {}


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _actor(payload: Mapping[str, Any]) -> str:
    for path in (
        ("sender", "login"),
        ("pusher", "name"),
        ("comment", "user", "login"),
    ):
        value = _dig(payload, path)
        if isinstance(value, str) and value:
            return value
    return ""


def _repo(payload: Mapping[str, Any]) -> str:
    for path in (
        ("repository", "full_name"),
        ("repository", "name"),
    ):
        value = _dig(payload, path)
        if isinstance(value, str) and value:
            return value
    return ""


def _revision_check_suite(payload: Mapping[str, Any]) -> Revision:
    return Revision(
        ref=_str(_dig(payload, ("check_suite", "head_branch"))),
        commit=_str(_dig(payload, ("check_suite", "head_sha"))),
    )


def _revision_check_run(payload: Mapping[str, Any]) -> Revision:
    return Revision(
        ref=_str(_dig(payload, ("check_run", "check_suite", "head_branch"))),
        commit=_str(_dig(payload, ("check_run", "head_sha"))),
    )


def _revision_push(payload: Mapping[str, Any]) -> Revision:
    return Revision(ref=_str(payload.get("ref")), commit=_str(payload.get("after")))


def _revision_issue_comment(payload: Mapping[str, Any]) -> Revision:
    # Only pull-request comments carry a revision; plain issues have none.
    number = _dig(payload, ("issue", "number"))
    if _dig(payload, ("issue", "pull_request")) is None or number is None:
        return Revision()
    return Revision(ref=f"refs/pull/{number}/head")


def _revision_pull_request(payload: Mapping[str, Any]) -> Revision:
    branch = _str(_dig(payload, ("pull_request", "head", "ref")))
    return Revision(
        ref=f"{HEAD_PREFIX}{branch}" if branch else "",
        commit=_str(_dig(payload, ("pull_request", "head", "sha"))),
    )


REVISIONS: dict[str, RevisionFn] = {
    "check_suite": _revision_check_suite,
    "check_run": _revision_check_run,
    "push": _revision_push,
    "issue_comment": _revision_issue_comment,
    "pull_request": _revision_pull_request,
}


def event_key(event: str, payload: Mapping[str, Any] | None) -> str:
    """``check_run`` + ``{"action": "rerequested"}`` -> ``check_run:rerequested``"""
    name = (event or "").lower()
    action = _str(_ensure_mapping(payload).get("action"))
    if name in ACTION_EVENTS and action:
        return f"{name}:{action}"
    return name or UNKNOWN


def to_event(
    event: str,
    payload: Mapping[str, Any] | None,
    delivery_id: Optional[str] = None,
) -> Event:
    """
    Build a router :class:`Event` from one webhook delivery.

    The delivery is wrapped as ``{"body": ...}`` and kept as a JSON string,
    which is the form the check-run reporter expects in ``CHECK_PAYLOAD``.
    """
    payload = _ensure_mapping(payload)
    revision_fn = REVISIONS.get((event or "").lower())
    revision = revision_fn(payload) if revision_fn else Revision()
    return Event(
        type=event_key(event, payload),
        revision=revision,
        payload=json.dumps({"body": payload}, ensure_ascii=False, default=str),
        build_id=delivery_id or new_build_id(),
    )


def new_build_id() -> str:
    return uuid.uuid4().hex


def summarize_event(event: Event) -> str:
    """One plain-text line for the delivery log."""
    body = event.body()
    line = event.type
    repo = _repo(body)
    if repo:
        line += f" in {repo}"
    if event.revision.ref:
        line += f" at {event.revision.ref}"
    if event.revision.commit:
        line += f" ({event.revision.commit[:7]})"
    actor = _actor(body)
    if actor:
        line += f" by {actor}"
    return line
