"""
Running actions, alone or wrapped between check-run notifications.

``run_with_notification`` is the core: start report, job, outcome report.
``run_check``/``run_suite``/``run_sequence`` build notifications for registry
entries; ``run_jobs_*`` run bare jobs for events that have no check suite.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, Optional, Sequence

from checkrunner.errors import NotificationError, SuiteFailedError
from checkrunner.services.actions import ActionDefinition
from checkrunner.services.events import Event, Project
from checkrunner.services.executor import JobExecutor
from checkrunner.services.notification import FAILURE, SUCCESS, Notification
from checkrunner.services.registry import CheckRegistryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchContext:
    """Everything a dispatch needs besides the event; built once at startup."""

    project: Project
    executor: JobExecutor
    notification_image: str
    details_url_template: str = ""


@dataclass(frozen=True)
class CheckOutcome:
    check: str
    conclusion: str
    job_error: Optional[BaseException] = None
    notify_error: Optional[NotificationError] = None

    @property
    def failed(self) -> bool:
        return self.job_error is not None or self.notify_error is not None


async def _fetch_logs(executor: JobExecutor, action: ActionDefinition) -> str:
    try:
        logs = await executor.logs(action.name, action.build_id)
    except Exception as exc:
        logger.warning("could not fetch logs for %s: %s", action.name, exc)
        return ""
    logger.debug("logs for %s", action.name, extra={"job": action.name, "logs": logs})
    return logs


async def run_with_notification(
    action: ActionDefinition,
    notification: Notification,
    executor: JobExecutor,
) -> CheckOutcome:
    """
    Send the start report, run ``action``, then report success or failure.

    Any exception from the job counts as a failure and is reported as one.
    A failing start report propagates and the job is not run. A failing
    outcome report is logged together with the job error (if any) and
    returned on the outcome instead of being raised.
    """
    await notification.send(executor)

    try:
        await executor.run(action)
    except Exception as exc:
        await _fetch_logs(executor, action)
        notification.mark_failure(
            summary=f'Task "{action.name}" failed for {notification.external_id}',
            text=f"Task failed with error: {exc}",
        )
        try:
            await notification.send(executor)
        except NotificationError as notify_exc:
            logger.error("failed to send notification: %s", notify_exc)
            logger.error("original error: %s", exc)
            return CheckOutcome(notification.name, FAILURE, job_error=exc, notify_error=notify_exc)
        return CheckOutcome(notification.name, FAILURE, job_error=exc)

    await _fetch_logs(executor, action)
    notification.mark_success(
        summary=f'Task "{action.name}" passed',
        text=f"Task Complete: {SUCCESS}",
    )
    try:
        await notification.send(executor)
    except NotificationError as notify_exc:
        logger.error("failed to send notification: %s", notify_exc)
        return CheckOutcome(notification.name, SUCCESS, notify_error=notify_exc)
    return CheckOutcome(notification.name, SUCCESS)


def new_notification(ctx: DispatchContext, event: Event, entry: CheckRegistryEntry) -> Notification:
    description = entry.description
    return Notification(
        entry.id,
        event,
        image=ctx.notification_image,
        details_url_template=ctx.details_url_template,
        title=f"Run {description}",
        summary=f"Running {description} for {event.revision.commit}",
        text=f"Ensuring {description} complete(s) successfully",
        conclusion="",
    )


async def run_check(ctx: DispatchContext, event: Event, entry: CheckRegistryEntry) -> CheckOutcome:
    logger.info("Check requested: %s", entry.description, extra={"build_id": event.build_id})
    action = entry.builder(event, ctx.project)
    return await run_with_notification(action, new_notification(ctx, event, entry), ctx.executor)


def _collect(results: Sequence[Any]) -> list[Any]:
    failures: list[Any] = []
    for result in results:
        if isinstance(result, CheckOutcome):
            if result.failed:
                failures.append(result)
        elif isinstance(result, Exception):
            failures.append(result)
        elif isinstance(result, BaseException):
            raise result
    return failures


async def _settle_all(awaitables: Iterable[Awaitable[Any]]) -> list[Any]:
    return list(await asyncio.gather(*awaitables, return_exceptions=True))


async def run_suite(
    ctx: DispatchContext, event: Event, entries: Iterable[CheckRegistryEntry]
) -> list[CheckOutcome]:
    """Run every check concurrently; raise ``SuiteFailedError`` once all have settled."""
    results = await _settle_all(run_check(ctx, event, entry) for entry in entries)
    failures = _collect(results)
    if failures:
        raise SuiteFailedError(failures, results)
    return results


async def run_sequence(
    ctx: DispatchContext, event: Event, entries: Iterable[CheckRegistryEntry]
) -> list[CheckOutcome]:
    """Run checks one at a time; stop at the first failure."""
    outcomes: list[CheckOutcome] = []
    for entry in entries:
        try:
            outcome = await run_check(ctx, event, entry)
        except NotificationError as exc:
            raise SuiteFailedError([exc], outcomes) from exc
        outcomes.append(outcome)
        if outcome.failed:
            raise SuiteFailedError([outcome], outcomes)
    return outcomes


async def run_jobs_parallel(executor: JobExecutor, actions: Iterable[ActionDefinition]) -> list[Any]:
    results = await _settle_all(executor.run(action) for action in actions)
    failures = _collect(results)
    if failures:
        raise SuiteFailedError(failures, results)
    return results


async def run_jobs_sequential(executor: JobExecutor, actions: Iterable[ActionDefinition]) -> list[Any]:
    results: list[Any] = []
    for action in actions:
        try:
            results.append(await executor.run(action))
        except Exception as exc:
            raise SuiteFailedError([exc], results) from exc
    return results
