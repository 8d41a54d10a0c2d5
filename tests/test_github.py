from __future__ import annotations

import hashlib
import hmac
import json

from checkrunner.services.github import event_key, summarize_event, to_event
from checkrunner.utils import admin_key_ok, gh_verify


def test_event_key():
    assert event_key("check_run", {"action": "rerequested"}) == "check_run:rerequested"
    assert event_key("check_suite", {"action": "requested"}) == "check_suite:requested"
    assert event_key("push", {"action": "ignored"}) == "push"
    assert event_key("", {}) == "unknown"


def test_check_suite_revision():
    payload = {
        "action": "requested",
        "check_suite": {"head_branch": "main", "head_sha": "deadbeef"},
        "repository": {"full_name": "getporter/porter"},
        "sender": {"login": "octocat"},
    }
    event = to_event("check_suite", payload, "delivery-1")
    assert event.type == "check_suite:requested"
    assert event.revision.ref == "main"
    assert event.revision.commit == "deadbeef"
    assert event.build_id == "delivery-1"
    assert json.loads(event.payload) == {"body": payload}
    assert summarize_event(event) == "check_suite:requested in getporter/porter at main (deadbee) by octocat"


def test_check_run_body_is_reachable():
    payload = {
        "action": "rerequested",
        "check_run": {"name": "unittest", "head_sha": "cafe", "check_suite": {"head_branch": "fix"}},
    }
    event = to_event("check_run", payload)
    assert event.body()["check_run"]["name"] == "unittest"
    assert event.revision.ref == "fix"
    assert event.build_id


def test_push_tag():
    event = to_event("push", {"ref": "refs/tags/v1.0.0", "after": "abc"})
    assert event.type == "push"
    assert event.revision.is_tag
    assert event.revision.commit == "abc"


def test_issue_comment_on_pull_request():
    payload = {
        "action": "created",
        "issue": {"number": 12, "pull_request": {"url": "x"}},
        "comment": {"body": "/brig run"},
    }
    event = to_event("issue_comment", payload)
    assert event.type == "issue_comment:created"
    assert event.revision.ref == "refs/pull/12/head"


def test_gh_verify():
    body = b'{"a": 1}'
    sig = "sha256=" + hmac.new(b"key", body, hashlib.sha256).hexdigest()
    assert gh_verify("key", body, sig)
    assert not gh_verify("other", body, sig)
    assert not gh_verify("key", body, None)


def test_admin_key_ok():
    assert admin_key_ok("k", "k")
    assert not admin_key_ok("k", "x")
    assert not admin_key_ok("", "")
