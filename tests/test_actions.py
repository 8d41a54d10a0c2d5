from __future__ import annotations

from checkrunner.services import actions
from checkrunner.services.actions import JOB_NAME_RE, ActionDefinition, enable_dind
from checkrunner.services.events import SecretRef

from conftest import make_event

BUILDERS = (
    actions.build,
    actions.validate,
    actions.xbuild,
    actions.unit_tests,
    actions.integration_tests,
    actions.cli_tests,
    actions.publish,
    actions.publish_examples,
)


def test_every_builder_yields_a_unique_safe_name(project):
    event = make_event()
    names = [builder(event, project).name for builder in BUILDERS]
    assert len(set(names)) == len(names)
    for name in names:
        assert JOB_NAME_RE.match(name), name
        assert name.startswith("porter-")


def test_go_job_moves_sources_before_running_make(project):
    action = actions.unit_tests(make_event(), project)
    assert action.image == project.job_image
    assert action.tasks[0] == "mkdir -p /go/src/get.porter.sh/porter"
    assert action.tasks[3] == "cd /go/src/get.porter.sh/porter"
    assert action.tasks[-1] == "make test-unit"
    assert action.timeout_millis == 1800000
    assert action.privileged is False


def test_enable_dind_is_privileged_and_starts_daemon():
    base = ActionDefinition(name="porter-x", image="img", tasks=("true",))
    dind = enable_dind(base)
    assert dind.privileged is True
    assert dind.tasks == ("true", "dockerd-entrypoint.sh &", "sleep 20")
    assert base.privileged is False


def test_cli_tests_run_after_daemon_start(project):
    action = actions.cli_tests(make_event(), project)
    assert action.privileged
    assert action.tasks.index("dockerd-entrypoint.sh &") < action.tasks.index("make test-cli")


def test_secrets_are_passed_through_unresolved(project):
    event = make_event()
    integration = actions.integration_tests(event, project)
    assert integration.env["kubeconfig"] == SecretRef("porter-kubeconfig", "kubeconfig")
    assert integration.to_job()["env"]["kubeconfig"] == {
        "secretKeyRef": {"name": "porter-kubeconfig", "key": "kubeconfig"}
    }

    publish = actions.publish(event, project)
    assert publish.env["AZURE_STORAGE_CONNECTION_STRING"] == project.secrets["azureStorageConnectionString"]


def test_publish_examples_logs_into_registry(project):
    action = actions.publish_examples(make_event(), project)
    assert "docker login docker.io -u bot -p hunter2" in action.tasks
    assert action.tasks[-1] == "REGISTRY=getporter make build-bundle validate-bundle publish-bundle"


def test_to_job_shape(project):
    job = actions.build(make_event(), project).to_job()
    assert set(job) == {"name", "image", "env", "tasks", "privileged", "timeoutMillis", "buildId"}
    assert job["buildId"] == "build-1"
    assert job["tasks"][-1] == "make build"
    assert job["timeoutMillis"] == 1800000


def test_builders_do_not_share_state(project):
    event = make_event()
    first = actions.build(event, project)
    second = actions.build(event, project)
    assert first == second
    assert first.with_tasks("echo extra").tasks != first.tasks


def test_every_builder_carries_the_build_id(project):
    event = make_event(build_id="d-42")
    for builder in BUILDERS:
        assert builder(event, project).build_id == "d-42", builder.__name__
