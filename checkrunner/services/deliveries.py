"""Recording inbound events and routing them outside the request cycle."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from sqlalchemy.orm import Session

from checkrunner.errors import CheckRunnerError, SuiteFailedError
from checkrunner.models import ERROR, IGNORED, ROUTED, CheckRunLog, EventDelivery
from checkrunner.services.dispatch import CheckOutcome
from checkrunner.services.events import Event
from checkrunner.services.github import summarize_event
from checkrunner.services.router import NOOP, EventRouter
from checkrunner.timezone import now_local

logger = logging.getLogger(__name__)


def record_delivery(db: Session, event: Event, *, source: str = "github") -> EventDelivery:
    delivery = EventDelivery(
        build_id=event.build_id,
        event_type=event.type,
        source=source,
        ref=event.revision.ref,
        commit=event.revision.commit,
        summary=summarize_event(event),
        payload=event.payload,
    )
    db.add(delivery)
    db.commit()
    db.refresh(delivery)
    return delivery


def _outcomes(results: Iterable[Any]) -> list[CheckOutcome]:
    return [r for r in results if isinstance(r, CheckOutcome)]


def _check_rows(delivery_id: int, outcomes: Iterable[CheckOutcome]) -> list[CheckRunLog]:
    return [
        CheckRunLog(
            delivery_id=delivery_id,
            check_name=outcome.check,
            conclusion=outcome.conclusion,
            job_error=str(outcome.job_error) if outcome.job_error else None,
            notify_error=str(outcome.notify_error) if outcome.notify_error else None,
        )
        for outcome in outcomes
    ]


async def process_event(
    router: EventRouter,
    event: Event,
    delivery_id: int,
    session_factory: Callable[[], Session],
) -> None:
    """
    Route ``event`` and store the result on its delivery row.

    Check failures are expected outcomes and end here (logged, status
    ``error``); anything else is recorded and re-raised.
    """
    status = ERROR
    action = ""
    error_message = None
    outcomes: list[CheckOutcome] = []
    try:
        result = await router.handle(event)
        action = result.action
        outcomes = _outcomes(result.results)
        status = IGNORED if result.action == NOOP else ROUTED
    except SuiteFailedError as exc:
        error_message = str(exc)
        outcomes = _outcomes(exc.results)
        logger.error("event %s failed: %s", event.type, exc, extra={"build_id": event.build_id})
    except CheckRunnerError as exc:
        error_message = str(exc)
        logger.error("event %s failed: %s", event.type, exc, extra={"build_id": event.build_id})
    except Exception as exc:
        error_message = f"{type(exc).__name__}: {exc}"
        raise
    finally:
        with session_factory() as db:
            delivery = db.get(EventDelivery, delivery_id)
            if delivery is not None:
                delivery.status = status
                delivery.action = action
                delivery.error_message = error_message
                delivery.finished_at = now_local()
                db.add_all(_check_rows(delivery.id, outcomes))
                db.commit()
