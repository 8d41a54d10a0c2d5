from __future__ import annotations

import asyncio

import pytest

from checkrunner.errors import NotificationError
from checkrunner.services.notification import (
    FAILURE,
    NEUTRAL,
    PENDING,
    REPORTED,
    SUCCESS,
    Notification,
)

from conftest import NOTIFICATION_IMAGE, FakeExecutor, make_event


def _note(**kwargs):
    return Notification(
        "unittest",
        make_event(build_id="01abc"),
        image=NOTIFICATION_IMAGE,
        details_url_template="https://ci.example/builds/{build_id}",
        **kwargs,
    )


def test_defaults():
    note = _note()
    assert note.conclusion == NEUTRAL
    assert note.state == PENDING
    assert note.send_count == 0
    assert note.details_url == "https://ci.example/builds/01abc"
    assert note.external_id == "01abc"


def test_send_count_increases_and_job_names_differ():
    executor = FakeExecutor()
    note = _note()
    for expected in (1, 2, 3):
        asyncio.run(note.send(executor))
        assert note.send_count == expected
    names = [a.name for a in executor.calls]
    assert names == ["unittest-1", "unittest-2", "unittest-3"]


def test_report_env_matches_reporter_contract():
    executor = FakeExecutor()
    note = _note(title="Run Unit Test", summary="Running", text="Ensuring")
    asyncio.run(note.send(executor))
    env = executor.calls[0].env
    assert env == {
        "CHECK_CONCLUSION": NEUTRAL,
        "CHECK_NAME": "unittest",
        "CHECK_TITLE": "Run Unit Test",
        "CHECK_PAYLOAD": note.payload,
        "CHECK_SUMMARY": "Running",
        "CHECK_TEXT": "Ensuring",
        "CHECK_DETAILS_URL": "https://ci.example/builds/01abc",
        "CHECK_EXTERNAL_ID": "01abc",
    }
    assert executor.calls[0].image == NOTIFICATION_IMAGE


def test_reports_are_snapshots():
    executor = FakeExecutor()
    note = _note(conclusion="")
    asyncio.run(note.send(executor))
    note.mark_success("done", "Task Complete: success")
    asyncio.run(note.send(executor))
    first, second = note.reports
    assert first.conclusion == ""
    assert second.conclusion == SUCCESS
    assert first.summary == "" and second.summary == "done"
    assert note.state == REPORTED


def test_failed_delivery_raises():
    executor = FakeExecutor(fail_reports={"unittest-1"})
    note = _note()
    with pytest.raises(NotificationError) as excinfo:
        asyncio.run(note.send(executor))
    assert excinfo.value.report_job == "unittest-1"
    assert note.send_count == 1


def test_mark_failure():
    note = _note()
    note.mark_failure("broke", "Task failed with error: boom")
    assert note.conclusion == FAILURE
    assert note.state == REPORTED


def test_unknown_conclusion_rejected():
    with pytest.raises(ValueError):
        _note(conclusion="maybe")
