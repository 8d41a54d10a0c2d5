"""GitHub Check Run notifications, delivered as jobs against the reporting image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from checkrunner.errors import NotificationError
from checkrunner.services.actions import ActionDefinition
from checkrunner.services.events import Event
from checkrunner.services.executor import JobExecutor

NEUTRAL = "neutral"
SUCCESS = "success"
FAILURE = "failure"
CANCELLED = "cancelled"
TIMED_OUT = "timed_out"

CONCLUSIONS = frozenset({NEUTRAL, SUCCESS, FAILURE, CANCELLED, TIMED_OUT})
FINAL_CONCLUSIONS = frozenset({SUCCESS, FAILURE})

PENDING = "pending"
REPORTED = "reported"

REPORT_TIMEOUT_MILLIS = 5 * 60 * 1000


@dataclass(frozen=True)
class CheckReport:
    """Snapshot of a notification at the moment it was sent."""

    name: str
    external_id: str
    details_url: str
    payload: str
    title: str
    summary: str
    text: str
    conclusion: str
    sequence: int

    @property
    def job_name(self) -> str:
        return f"{self.name}-{self.sequence}"

    def to_env(self) -> dict[str, str]:
        return {
            "CHECK_CONCLUSION": self.conclusion,
            "CHECK_NAME": self.name,
            "CHECK_TITLE": self.title,
            "CHECK_PAYLOAD": self.payload,
            "CHECK_SUMMARY": self.summary,
            "CHECK_TEXT": self.text,
            "CHECK_DETAILS_URL": self.details_url,
            "CHECK_EXTERNAL_ID": self.external_id,
        }

    def to_action(self, image: str) -> ActionDefinition:
        return ActionDefinition(
            name=self.job_name,
            image=image,
            env=self.to_env(),
            timeout_millis=REPORT_TIMEOUT_MILLIS,
            build_id=self.external_id,
        )


class Notification:
    """
    One check run as seen by GitHub.

    The notification starts *pending* with a neutral (or empty) conclusion and
    becomes *reported* once :meth:`mark_success` or :meth:`mark_failure` sets a
    final conclusion. Every :meth:`send` bumps ``send_count`` and emits a new
    :class:`CheckReport`, so each report job has its own name.
    """

    def __init__(
        self,
        name: str,
        event: Event,
        *,
        image: str,
        details_url_template: str = "",
        title: str = "running check",
        summary: str = "",
        text: str = "",
        conclusion: str = NEUTRAL,
    ) -> None:
        if conclusion and conclusion not in CONCLUSIONS:
            raise ValueError(f"unknown conclusion: {conclusion!r}")
        self.name = name
        self.image = image
        self.payload = event.payload
        self.external_id = event.build_id
        self.details_url = (
            details_url_template.format(build_id=event.build_id) if details_url_template else ""
        )
        self.title = title
        self.summary = summary
        self.text = text
        self.conclusion = conclusion
        self.send_count = 0
        self.reports: list[CheckReport] = []

    @property
    def state(self) -> str:
        return REPORTED if self.conclusion in FINAL_CONCLUSIONS else PENDING

    def mark_success(self, summary: str, text: str) -> None:
        self._finish(SUCCESS, summary, text)

    def mark_failure(self, summary: str, text: str) -> None:
        self._finish(FAILURE, summary, text)

    def _finish(self, conclusion: str, summary: str, text: str) -> None:
        self.conclusion = conclusion
        self.summary = summary
        self.text = text

    def snapshot(self) -> CheckReport:
        return CheckReport(
            name=self.name,
            external_id=self.external_id,
            details_url=self.details_url,
            payload=self.payload,
            title=self.title,
            summary=self.summary,
            text=self.text,
            conclusion=self.conclusion,
            sequence=self.send_count,
        )

    async def send(self, executor: JobExecutor) -> dict[str, Any]:
        """Run one reporting job; a failed delivery raises :class:`NotificationError`."""
        self.send_count += 1
        report = self.snapshot()
        self.reports.append(report)
        try:
            return await executor.run(report.to_action(self.image))
        except Exception as exc:
            raise NotificationError(report.job_name, exc) from exc

    def __repr__(self) -> str:
        return f"Notification(name={self.name!r}, conclusion={self.conclusion!r}, sends={self.send_count})"
