"""Check registry: the fixed set of check runs GitHub can (re-)request by name."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from checkrunner.errors import CheckNotFoundError
from checkrunner.services import actions
from checkrunner.services.actions import Builder

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")


def check_id(description: str) -> str:
    """'Cross-Platform Build' -> 'crossplatformbuild'"""
    return _UNSAFE_CHARS.sub("", description.lower())


@dataclass(frozen=True)
class CheckRegistryEntry:
    id: str
    builder: Builder
    description: str


class CheckRegistry:
    """Read-only mapping from check id to entry, in registration order."""

    def __init__(self, checks: Iterable[tuple[Builder, str]]) -> None:
        entries: dict[str, CheckRegistryEntry] = {}
        for builder, description in checks:
            entry = CheckRegistryEntry(check_id(description), builder, description)
            if not entry.id:
                raise ValueError(f"description yields an empty check id: {description!r}")
            if entry.id in entries:
                raise ValueError(f"duplicate check id: {entry.id}")
            entries[entry.id] = entry
        self._entries = entries

    def lookup(self, id: str) -> CheckRegistryEntry:
        try:
            return self._entries[id]
        except KeyError:
            raise CheckNotFoundError(id) from None

    def entries(self) -> tuple[CheckRegistryEntry, ...]:
        return tuple(self._entries.values())

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def __iter__(self) -> Iterator[CheckRegistryEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


# Standard pull-request checks, run together on a check suite request.
DEFAULT_REGISTRY = CheckRegistry(
    [
        (actions.build, "Build"),
        (actions.validate, "Validate"),
        (actions.xbuild, "Cross-Platform Build"),
        (actions.unit_tests, "Unit Test"),
        (actions.integration_tests, "Integration Test"),
        (actions.cli_tests, "CLI Test"),
    ]
)

# Mainline pipeline, run strictly in this order.
MAINLINE_CHECKS: tuple[CheckRegistryEntry, ...] = CheckRegistry(
    [
        (actions.unit_tests, "Unit Test"),
        (actions.integration_tests, "Integration Test"),
        (actions.cli_tests, "CLI Test"),
        (actions.publish, "Publish"),
        (actions.publish_examples, "Publish Example Bundles"),
    ]
).entries()
