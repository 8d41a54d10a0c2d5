"""Exception hierarchy shared by the services."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class CheckRunnerError(Exception):
    """Base class for every error raised by this package."""


class CheckNotFoundError(CheckRunnerError, LookupError):
    """Raised when a check id has no registry entry."""

    def __init__(self, check_id: str) -> None:
        super().__init__(f"No check found with name: {check_id}")
        self.check_id = check_id


class JobFailedError(CheckRunnerError):
    """A job finished unsuccessfully or could not be handed to the executor."""

    def __init__(self, job_name: str, message: str) -> None:
        super().__init__(f"job {job_name} failed: {message}")
        self.job_name = job_name
        self.message = message


class JobTimeoutError(JobFailedError):
    """A job ran past its timeout."""

    def __init__(self, job_name: str, timeout_millis: int) -> None:
        super().__init__(job_name, f"timed out after {timeout_millis}ms")
        self.timeout_millis = timeout_millis


class NotificationError(CheckRunnerError):
    """The check-run reporting job could not deliver a report."""

    def __init__(self, report_job: str, cause: BaseException) -> None:
        super().__init__(f"failed to send notification {report_job}: {cause}")
        self.report_job = report_job
        self.cause = cause


class SuiteFailedError(CheckRunnerError):
    """Raised once every check of a suite has settled and at least one failed."""

    def __init__(self, failures: Sequence[Any], results: Optional[Sequence[Any]] = None) -> None:
        self.failures = list(failures)
        # Every settled result, failed or not.
        self.results = list(results) if results is not None else list(self.failures)
        names = ", ".join(_failure_label(f) for f in self.failures)
        super().__init__(f"{len(self.failures)} check(s) failed: {names}")


def _failure_label(failure: Any) -> str:
    label = getattr(failure, "check", None) or getattr(failure, "job_name", None)
    if label:
        return str(label)
    return str(failure)
