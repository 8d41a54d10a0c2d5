"""Runtime settings, read once from the environment (and `.env`)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    db_url: str = os.getenv("DB_URL", "sqlite:///./checkrunner.sqlite3")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    timezone: str = os.getenv("TIMEZONE", "UTC")

    project_name: str = os.getenv("PROJECT_NAME", "porter")
    project_module_path: str = os.getenv("PROJECT_MODULE_PATH", "get.porter.sh/porter")
    mainline_branch: str = os.getenv("MAINLINE_BRANCH", "main")
    comment_trigger: str = os.getenv("COMMENT_TRIGGER", "/brig run")

    job_image: str = os.getenv("JOB_IMAGE", "quay.io/vdice/go-dind:v0.1.2")
    kind_job_image: str = os.getenv("KIND_JOB_IMAGE", "vdice/go-dind:kind-v0.7.0")
    notification_image: str = os.getenv(
        "NOTIFICATION_IMAGE", "brigadecore/brigade-github-check-run:v0.1.0"
    )
    details_url_template: str = os.getenv(
        "DETAILS_URL_TEMPLATE", "https://brigadecore.github.io/kashti/builds/{build_id}"
    )
    # 30 minutes
    job_timeout_millis: int = int(os.getenv("JOB_TIMEOUT_MILLIS", "1800000"))

    executor_url: str = os.getenv("EXECUTOR_URL", "http://localhost:7745")
    executor_token: str = os.getenv("EXECUTOR_TOKEN", "")

    github_webhook_secret: str = os.getenv("GITHUB_WEBHOOK_SECRET", "")
    admin_http_key: str = os.getenv("ADMIN_HTTP_KEY", "supersecret-admin-key")

    # Opaque pass-through values handed to jobs, never parsed here.
    dockerhub_registry: str = os.getenv("DOCKERHUB_REGISTRY", "docker.io")
    dockerhub_username: str = os.getenv("DOCKERHUB_USERNAME", "")
    dockerhub_password: str = os.getenv("DOCKERHUB_PASSWORD", "")
    dockerhub_org: str = os.getenv("DOCKERHUB_ORG", "")
    azure_storage_connection_string: str = os.getenv("AZURE_STORAGE_CONNECTION_STRING", "")
    kubeconfig_secret_name: str = os.getenv("KUBECONFIG_SECRET_NAME", "porter-kubeconfig")


settings = Settings()
