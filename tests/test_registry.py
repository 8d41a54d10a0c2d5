from __future__ import annotations

import re

import pytest

from checkrunner.errors import CheckNotFoundError
from checkrunner.services import actions
from checkrunner.services.registry import (
    DEFAULT_REGISTRY,
    MAINLINE_CHECKS,
    CheckRegistry,
    check_id,
)

from conftest import make_event

SAFE = re.compile(r"^[a-z0-9-]+$")


def test_ids_derive_from_descriptions():
    assert check_id("Cross-Platform Build") == "crossplatformbuild"
    assert check_id("CLI Test") == "clitest"
    assert [entry.id for entry in DEFAULT_REGISTRY] == [
        "build",
        "validate",
        "crossplatformbuild",
        "unittest",
        "integrationtest",
        "clitest",
    ]


def test_every_entry_builds_a_unique_safe_action(project):
    event = make_event()
    names = set()
    for entry in DEFAULT_REGISTRY.entries():
        assert SAFE.match(entry.id)
        action = DEFAULT_REGISTRY.lookup(entry.id).builder(event, project)
        assert SAFE.match(action.name)
        names.add(action.name)
    assert len(names) == len(DEFAULT_REGISTRY)


def test_lookup_unknown_id():
    with pytest.raises(CheckNotFoundError) as excinfo:
        DEFAULT_REGISTRY.lookup("publish")
    assert excinfo.value.check_id == "publish"
    assert isinstance(excinfo.value, LookupError)
    assert "No check found with name: publish" in str(excinfo.value)


def test_lookup_returns_description():
    entry = DEFAULT_REGISTRY.lookup("unittest")
    assert entry.description == "Unit Test"
    assert entry.builder is actions.unit_tests


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError):
        CheckRegistry([(actions.build, "Build"), (actions.xbuild, "build")])


def test_mainline_order():
    assert [entry.description for entry in MAINLINE_CHECKS] == [
        "Unit Test",
        "Integration Test",
        "CLI Test",
        "Publish",
        "Publish Example Bundles",
    ]
