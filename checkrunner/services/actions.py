"""
Action definitions.

Each builder takes ``(event, project)`` and returns an :class:`ActionDefinition`
describing one containerized unit of work. Builders never perform I/O and
never resolve secrets: secret values are copied from ``project.secrets`` as-is,
and :class:`SecretRef` entries are passed through for the job platform.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping

from checkrunner.services.events import Event, Project, SecretRef

# Job names become Kubernetes resource names on the executor side.
JOB_NAME_RE = re.compile(r"^[a-z0-9-]+$")

DIND_TASKS = ("dockerd-entrypoint.sh &", "sleep 20")

EnvValue = str | SecretRef
Builder = Callable[[Event, Project], "ActionDefinition"]


@dataclass(frozen=True)
class ActionDefinition:
    name: str
    image: str
    env: Mapping[str, EnvValue] = field(default_factory=dict)
    tasks: tuple[str, ...] = ()
    privileged: bool = False
    timeout_millis: int = 1800000
    # Job names repeat across builds; the build id keeps each run addressable.
    build_id: str = ""

    def with_tasks(self, *tasks: str) -> ActionDefinition:
        return replace(self, tasks=self.tasks + tuple(tasks))

    def with_env(self, **env: EnvValue) -> ActionDefinition:
        return replace(self, env={**self.env, **env})

    def to_job(self) -> dict[str, Any]:
        """Outbound job description handed to the executor."""
        return {
            "name": self.name,
            "image": self.image,
            "env": {
                key: value.to_dict() if isinstance(value, SecretRef) else value
                for key, value in self.env.items()
            },
            "tasks": list(self.tasks),
            "privileged": self.privileged,
            "timeoutMillis": self.timeout_millis,
            "buildId": self.build_id,
        }


def job_name(project: Project, suffix: str) -> str:
    name = f"{project.name}-{suffix}".lower()
    if not JOB_NAME_RE.match(name):
        raise ValueError(f"invalid job name: {name!r}")
    return name


def go_job(event: Event, project: Project, suffix: str, *, image: str | None = None) -> ActionDefinition:
    """A job with the sources moved into the Go module path."""
    local_path = f"/go/src/{project.module_path}"
    return ActionDefinition(
        name=job_name(project, suffix),
        image=image or project.job_image,
        tasks=(
            f"mkdir -p {local_path}",
            f"mv /src/* {local_path}",
            f"mv /src/.git {local_path}",
            f"cd {local_path}",
        ),
        timeout_millis=project.job_timeout_millis,
        build_id=event.build_id,
    )


def enable_dind(action: ActionDefinition) -> ActionDefinition:
    """Docker-in-Docker: privileged container plus a daemon started in the background."""
    return replace(action, privileged=True, tasks=action.tasks + DIND_TASKS)


def _registry_login(project: Project) -> str:
    return (
        f"docker login {project.secret('dockerhubRegistry')}"
        f" -u {project.secret('dockerhubUsername')}"
        f" -p {project.secret('dockerhubPassword')}"
    )


def build(event: Event, project: Project) -> ActionDefinition:
    return go_job(event, project, "build").with_tasks("make build")


def validate(event: Event, project: Project) -> ActionDefinition:
    return enable_dind(go_job(event, project, "validate")).with_tasks(
        "apk add --update npm",
        "npm install -g ajv-cli",
        "make build install",
        "make build-bundle validate-bundle",
    )


def xbuild(event: Event, project: Project) -> ActionDefinition:
    return go_job(event, project, "xbuild").with_tasks("make xbuild-all")


def unit_tests(event: Event, project: Project) -> ActionDefinition:
    return go_job(event, project, "testunit").with_tasks("make test-unit")


def integration_tests(event: Event, project: Project) -> ActionDefinition:
    action = ActionDefinition(
        name=job_name(project, "testintegration"),
        image=project.kind_job_image,
        env={"kubeconfig": project.secret("kubeconfig")} if project.secret("kubeconfig") else {},
        privileged=True,
        timeout_millis=project.job_timeout_millis,
        build_id=event.build_id,
    )
    return action.with_tasks(
        *DIND_TASKS,
        "mkdir -p /go/bin",
        "cd /src",
        "trap 'make -f Makefile.kind delete-kind-cluster' EXIT",
        "make -f Makefile.kind create-kind-cluster",
        "make test-integration",
    )


def cli_tests(event: Event, project: Project) -> ActionDefinition:
    return enable_dind(go_job(event, project, "testcli")).with_tasks("make test-cli")


def publish(event: Event, project: Project) -> ActionDefinition:
    action = go_job(event, project, "publish").with_env(
        AZURE_STORAGE_CONNECTION_STRING=project.secret("azureStorageConnectionString"),
    )
    return action.with_tasks(
        "curl -sLO https://github.com/carolynvs/az-cli/releases/download/v0.3.2/az-linux-amd64"
        " && chmod +x az-linux-amd64 && mv az-linux-amd64 /usr/local/bin/az",
        "make build xbuild-all publish",
    )


def publish_examples(event: Event, project: Project) -> ActionDefinition:
    return enable_dind(go_job(event, project, "publish-examples")).with_tasks(
        "apk add --update npm",
        "npm install -g ajv-cli",
        "make build install",
        _registry_login(project),
        f"REGISTRY={project.secret('dockerhubOrg')} make build-bundle validate-bundle publish-bundle",
    )
