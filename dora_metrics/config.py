from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

BACKENDS = ("pushgateway", "influxdb")


@dataclass(frozen=True)
class Settings:
    backend: str = "pushgateway"
    pushgateway_url: Optional[str] = None
    influxdb_url: Optional[str] = None
    influxdb_bucket: str = "default"
    job_name: str = "dora_metrics"
    environment: str = "production"
    project_name: Optional[str] = None
    github_token: Optional[str] = None
    github_repository: Optional[str] = None
    github_ref: Optional[str] = None
    github_event_path: Optional[str] = None
    yougile_api_key: Optional[str] = None
    http_timeout: float = 30.0
    lookup_concurrency: int = 5

    @property
    def backend_url(self) -> Optional[str]:
        if self.backend == "influxdb":
            return self.influxdb_url
        return self.pushgateway_url

    @property
    def repository_name(self) -> Optional[str]:
        """Repository without the owner part."""
        if not self.github_repository:
            return None
        return self.github_repository.rsplit("/", 1)[-1]

    @property
    def owner(self) -> Optional[str]:
        if not self.github_repository or "/" not in self.github_repository:
            return None
        return self.github_repository.split("/", 1)[0]


def _get(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = _get(env, name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> Settings:
    """Read settings from the environment (and a .env file when present)."""
    if env is None:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    backend = (_get(env, "METRICS_BACKEND", "pushgateway") or "pushgateway").lower()
    if backend not in BACKENDS:
        raise ConfigError(f"METRICS_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")

    return Settings(
        backend=backend,
        pushgateway_url=_get(env, "PUSHGATEWAY_URL"),
        influxdb_url=_get(env, "INFLUXDB_URL"),
        influxdb_bucket=_get(env, "INFLUXDB_BUCKET", "default"),
        job_name=_get(env, "METRICS_JOB_NAME", "dora_metrics"),
        environment=_get(env, "DEPLOY_ENVIRONMENT", "production"),
        project_name=_get(env, "PROJECT_NAME"),
        github_token=_get(env, "GITHUB_TOKEN"),
        github_repository=_get(env, "GITHUB_REPOSITORY"),
        github_ref=_get(env, "GITHUB_REF"),
        github_event_path=_get(env, "GITHUB_EVENT_PATH"),
        yougile_api_key=_get(env, "YOUGILE_API_KEY"),
        http_timeout=_number(env, "DORA_HTTP_TIMEOUT", 30.0, float),
        lookup_concurrency=_number(env, "DORA_LOOKUP_CONCURRENCY", 5, int),
    )
