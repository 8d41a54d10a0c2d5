"""Inbound event and project value types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from checkrunner.config import Settings

TAG_PREFIX = "refs/tags/"
HEAD_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class Revision:
    ref: str = ""
    commit: str = ""

    @property
    def is_tag(self) -> bool:
        return self.ref.startswith(TAG_PREFIX)


@dataclass(frozen=True)
class Event:
    """
    One inbound event.

    `payload` is kept as the raw JSON string; it is forwarded verbatim to the
    check-run reporter and only parsed on demand.
    """

    type: str
    revision: Revision = field(default_factory=Revision)
    payload: str = ""
    build_id: str = ""

    def body(self) -> Mapping[str, Any]:
        """Return `payload["body"]`, or an empty mapping when absent or unparsable."""
        if not self.payload:
            return {}
        try:
            data = json.loads(self.payload)
        except ValueError:
            return {}
        body = data.get("body") if isinstance(data, Mapping) else None
        return body if isinstance(body, Mapping) else {}


@dataclass(frozen=True)
class SecretRef:
    """Reference to a secret the job platform resolves; never read here."""

    name: str
    key: str

    def to_dict(self) -> dict[str, Any]:
        return {"secretKeyRef": {"name": self.name, "key": self.key}}


@dataclass(frozen=True)
class Project:
    """Per-process project configuration handed to builders and the router."""

    name: str
    module_path: str
    mainline_branch: str = "main"
    job_image: str = "quay.io/vdice/go-dind:v0.1.2"
    kind_job_image: str = "vdice/go-dind:kind-v0.7.0"
    job_timeout_millis: int = 1800000
    secrets: Mapping[str, Any] = field(default_factory=dict)

    def secret(self, key: str, default: Any = "") -> Any:
        return self.secrets.get(key, default)

    def is_mainline(self, ref: str) -> bool:
        return ref in (self.mainline_branch, f"{HEAD_PREFIX}{self.mainline_branch}")


def project_from_settings(settings: Settings) -> Project:
    return Project(
        name=settings.project_name,
        module_path=settings.project_module_path,
        mainline_branch=settings.mainline_branch,
        job_image=settings.job_image,
        kind_job_image=settings.kind_job_image,
        job_timeout_millis=settings.job_timeout_millis,
        secrets={
            "dockerhubRegistry": settings.dockerhub_registry,
            "dockerhubUsername": settings.dockerhub_username,
            "dockerhubPassword": settings.dockerhub_password,
            "dockerhubOrg": settings.dockerhub_org,
            "azureStorageConnectionString": settings.azure_storage_connection_string,
            "kubeconfig": SecretRef(settings.kubeconfig_secret_name, "kubeconfig"),
        },
    )
