"""Client for the external job-execution platform."""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

import httpx

from checkrunner.errors import JobFailedError, JobTimeoutError
from checkrunner.services.actions import ActionDefinition

HTTP_TIMEOUT_SECONDS = 15
JOB_SUCCEEDED = "succeeded"

JSONDict = dict[str, Any]


class JobExecutor(Protocol):
    async def run(self, action: ActionDefinition) -> JSONDict: ...

    async def logs(self, job_name: str, build_id: str = "") -> str: ...


class HttpJobExecutor:
    """
    Runs jobs through the platform's HTTP API.

    ``POST {base}/builds/{build_id}/jobs`` blocks until the job settles and
    answers ``{"status": "succeeded" | "failed", "error": ...}``. The job's own
    ``timeoutMillis`` bounds the wait on this side as well. Jobs without a
    build id go to ``{base}/jobs``.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._transport = transport

    def _jobs_url(self, build_id: str) -> str:
        if build_id:
            return f"{self.base_url}/builds/{build_id}/jobs"
        return f"{self.base_url}/jobs"

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        # Job runs are long: only connecting is bounded by the HTTP timeout.
        timeout = httpx.Timeout(HTTP_TIMEOUT_SECONDS, read=None)
        return httpx.AsyncClient(headers=headers, timeout=timeout, transport=self._transport)

    async def run(self, action: ActionDefinition) -> JSONDict:
        try:
            return await asyncio.wait_for(
                self._submit(action), timeout=action.timeout_millis / 1000
            )
        except asyncio.TimeoutError:
            raise JobTimeoutError(action.name, action.timeout_millis) from None

    async def _submit(self, action: ActionDefinition) -> JSONDict:
        try:
            async with self._client() as client:
                resp = await client.post(self._jobs_url(action.build_id), json=action.to_job())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise JobFailedError(action.name, f"executor unreachable: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if resp.status_code >= 300:
            raise JobFailedError(action.name, f"executor error: {resp.status_code} {resp.text}")
        if data.get("status") != JOB_SUCCEEDED:
            raise JobFailedError(action.name, str(data.get("error") or data.get("status") or "unknown status"))
        return data

    async def logs(self, job_name: str, build_id: str = "") -> str:
        try:
            async with self._client() as client:
                resp = await client.get(f"{self._jobs_url(build_id)}/{job_name}/logs")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise JobFailedError(job_name, f"could not fetch logs: {exc}") from exc
        if resp.status_code >= 300:
            raise JobFailedError(job_name, f"could not fetch logs: {resp.status_code} {resp.text}")
        return resp.text
