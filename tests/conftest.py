from __future__ import annotations

import asyncio
import json
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="checkrunner-tests-")
os.environ["DB_URL"] = f"sqlite:///{_DB_DIR}/test.sqlite3"
os.environ["GITHUB_WEBHOOK_SECRET"] = ""
os.environ["ADMIN_HTTP_KEY"] = "test-admin-key"
os.environ["TIMEZONE"] = "UTC"

import pytest  # noqa: E402

from checkrunner.errors import JobFailedError  # noqa: E402
from checkrunner.services.dispatch import DispatchContext  # noqa: E402
from checkrunner.services.events import Event, Project, Revision, SecretRef  # noqa: E402
from checkrunner.services.router import EventRouter  # noqa: E402

NOTIFICATION_IMAGE = "example/check-run:test"


class FakeExecutor:
    """In-memory job platform; records starts and ends in order."""

    def __init__(self, fail=(), fail_reports=()):
        self.fail = set(fail)
        self.fail_reports = set(fail_reports)
        self.calls = []
        self.timeline = []
        self.logs_requested = []

    async def run(self, action):
        self.calls.append(action)
        self.timeline.append(("start", action.name))
        await asyncio.sleep(0)
        self.timeline.append(("end", action.name))
        if action.name in self.fail or action.name in self.fail_reports:
            raise JobFailedError(action.name, "exit status 2")
        return {"status": "succeeded", "name": action.name}

    async def logs(self, job_name, build_id=""):
        self.logs_requested.append(job_name)
        return f"logs for {job_name}"

    @property
    def jobs(self):
        return [a.name for a in self.calls if a.image != NOTIFICATION_IMAGE]

    @property
    def reports(self):
        return [a for a in self.calls if a.image == NOTIFICATION_IMAGE]


def make_event(type_="check_suite:requested", ref="feature/x", commit="abc1234", body=None, build_id="build-1"):
    return Event(
        type=type_,
        revision=Revision(ref=ref, commit=commit),
        payload=json.dumps({"body": body or {}}),
        build_id=build_id,
    )


@pytest.fixture
def project():
    return Project(
        name="porter",
        module_path="get.porter.sh/porter",
        mainline_branch="main",
        secrets={
            "dockerhubRegistry": "docker.io",
            "dockerhubUsername": "bot",
            "dockerhubPassword": "hunter2",
            "dockerhubOrg": "getporter",
            "azureStorageConnectionString": "DefaultEndpointsProtocol=https;AccountName=x",
            "kubeconfig": SecretRef("porter-kubeconfig", "kubeconfig"),
        },
    )


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def ctx(project, executor):
    return DispatchContext(
        project=project,
        executor=executor,
        notification_image=NOTIFICATION_IMAGE,
        details_url_template="https://ci.example/builds/{build_id}",
    )


@pytest.fixture
def event_router(ctx):
    return EventRouter(ctx)
