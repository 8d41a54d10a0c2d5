"""Event router: picks which checks or jobs an inbound event runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from checkrunner.services import actions
from checkrunner.services.dispatch import (
    DispatchContext,
    run_check,
    run_jobs_parallel,
    run_jobs_sequential,
    run_sequence,
    run_suite,
)
from checkrunner.services.events import Event, Project
from checkrunner.services.registry import (
    DEFAULT_REGISTRY,
    MAINLINE_CHECKS,
    CheckRegistry,
    CheckRegistryEntry,
)

logger = logging.getLogger(__name__)

NOOP = "noop"

Handler = Callable[[Event], Awaitable["RouteResult"]]


@dataclass
class RouteResult:
    event: str
    action: str
    results: list[Any] = field(default_factory=list)


class EventRouter:
    """
    Maps event names to handlers.

    Handlers return a :class:`RouteResult` naming what was run; errors from
    the checks themselves (``SuiteFailedError``, ``CheckNotFoundError``)
    propagate to the caller.
    """

    def __init__(
        self,
        ctx: DispatchContext,
        *,
        registry: CheckRegistry = DEFAULT_REGISTRY,
        mainline_checks: tuple[CheckRegistryEntry, ...] = MAINLINE_CHECKS,
        comment_trigger: str = "/brig run",
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.mainline_checks = mainline_checks
        self.comment_trigger = comment_trigger
        self.handlers: dict[str, Handler] = {
            "check_suite:requested": self.on_check_suite,
            "check_suite:rerequested": self.on_check_suite,
            "check_run:rerequested": self.on_check_run,
            "push": self.on_push,
            "publish": self.on_publish,
            "publish-examples": self.on_publish_examples,
            "test-integration": self.on_test_integration,
            "exec": self.on_exec,
            "issue_comment:created": self.on_issue_comment,
            "issue_comment:edited": self.on_issue_comment,
        }

    @property
    def project(self) -> Project:
        return self.ctx.project

    def handles(self, event_type: str) -> bool:
        return event_type in self.handlers

    async def handle(self, event: Event) -> RouteResult:
        handler = self.handlers.get(event.type)
        if handler is None:
            logger.info("ignoring event %s", event.type, extra={"build_id": event.build_id})
            return RouteResult(event.type, NOOP)
        return await handler(event)

    async def on_check_suite(self, event: Event) -> RouteResult:
        if self.project.is_mainline(event.revision.ref):
            outcomes = await run_sequence(self.ctx, event, self.mainline_checks)
            return RouteResult(event.type, "mainline-suite", outcomes)
        outcomes = await run_suite(self.ctx, event, self.registry.entries())
        return RouteResult(event.type, "suite", outcomes)

    async def on_check_run(self, event: Event) -> RouteResult:
        check_run = event.body().get("check_run")
        name = check_run.get("name") if isinstance(check_run, dict) else None
        entry = self.registry.lookup(str(name or ""))
        outcome = await run_check(self.ctx, event, entry)
        return RouteResult(event.type, f"check:{entry.id}", [outcome])

    def _mainline_jobs(self, event: Event) -> list[actions.ActionDefinition]:
        return [entry.builder(event, self.project) for entry in self.mainline_checks]

    async def on_push(self, event: Event) -> RouteResult:
        # Branch pushes arrive as check_suite:requested; tag pushes do not.
        if not event.revision.is_tag:
            return RouteResult(event.type, NOOP)
        results = await run_jobs_sequential(self.ctx.executor, self._mainline_jobs(event))
        return RouteResult(event.type, "mainline", results)

    async def on_publish(self, event: Event) -> RouteResult:
        results = await run_jobs_sequential(self.ctx.executor, self._mainline_jobs(event))
        return RouteResult(event.type, "mainline", results)

    async def on_publish_examples(self, event: Event) -> RouteResult:
        result = await self.ctx.executor.run(actions.publish_examples(event, self.project))
        return RouteResult(event.type, "publish-examples", [result])

    async def on_test_integration(self, event: Event) -> RouteResult:
        jobs = [
            actions.integration_tests(event, self.project),
            actions.cli_tests(event, self.project),
        ]
        results = await run_jobs_parallel(self.ctx.executor, jobs)
        return RouteResult(event.type, "test-integration", results)

    async def on_exec(self, event: Event) -> RouteResult:
        builders = (
            actions.build,
            actions.xbuild,
            actions.unit_tests,
            actions.integration_tests,
            actions.cli_tests,
            actions.validate,
        )
        jobs = [builder(event, self.project) for builder in builders]
        results = await run_jobs_parallel(self.ctx.executor, jobs)
        return RouteResult(event.type, "exec", results)

    async def on_issue_comment(self, event: Event) -> RouteResult:
        comment = event.body().get("comment")
        text = comment.get("body") if isinstance(comment, dict) else None
        if comment_trigger_matches(text, self.comment_trigger):
            return await self.on_check_suite(event)
        logger.info("No applicable action found for comment: %s", (text or "").strip())
        return RouteResult(event.type, NOOP)


def comment_trigger_matches(text: Optional[str], trigger: str) -> bool:
    return (text or "").strip() == trigger
