from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ..adapters.tracker.yougile_client import YouGileClient
from ..config import BACKENDS, Settings, load_settings
from ..errors import ConfigError, DeliveryError
from .metrics_service import record_and_push_metrics

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dora-metrics",
        description="Compute DORA metrics for one deployment and push them to a metrics backend",
    )
    parser.add_argument(
        "--commits",
        help="JSON file with the deployment's commits ('-' for stdin). "
        "Defaults to the commits of the GitHub event payload",
    )
    parser.add_argument("--ref", help="Deployed git ref (e.g. refs/heads/main)")
    parser.add_argument("--repo", help="Repository in owner/repo format (e.g. acme/api)")
    parser.add_argument("--project", help="Project name used as a tag (defaults to the repository name)")
    parser.add_argument("--environment", help="Deployment environment (default: production)")
    parser.add_argument("--backend", choices=BACKENDS, help="Which metrics backend to push to")
    parser.add_argument("--url", help="Pushgateway or InfluxDB base URL")
    parser.add_argument("--job-name", help="Pushgateway job name (default: dora_metrics)")
    parser.add_argument("--bucket", help="InfluxDB database/bucket (default: default)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def load_commits(source: Optional[str], event_path: Optional[str]) -> List[Any]:
    """Read commits from an explicit JSON source or the webhook event payload."""
    if source == "-":
        data = json.load(sys.stdin)
    elif source:
        data = json.loads(Path(source).read_text(encoding="utf-8"))
    elif event_path:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
        data = payload.get("commits") or []
    else:
        raise ConfigError("No commits given: pass --commits or set GITHUB_EVENT_PATH")

    if not isinstance(data, list):
        raise ConfigError("Commits must be a JSON array")
    return data


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Settings with every command-line value that was given taking precedence."""
    backend = args.backend or settings.backend
    overrides = {
        "backend": backend,
        "github_ref": args.ref,
        "github_repository": args.repo,
        "project_name": args.project,
        "environment": args.environment,
        "job_name": args.job_name,
        "influxdb_bucket": args.bucket,
        "influxdb_url" if backend == "influxdb" else "pushgateway_url": args.url,
    }
    return replace(settings, **{name: value for name, value in overrides.items() if value})


def run(args: argparse.Namespace, settings: Settings) -> int:
    settings = apply_overrides(settings, args)
    if not settings.backend_url:
        raise ConfigError(f"No URL configured for the {settings.backend} backend")
    if not settings.repository_name:
        raise ConfigError("Repository is required: pass --repo or set GITHUB_REPOSITORY")

    commits = load_commits(args.commits, settings.github_event_path)
    tracker = YouGileClient(settings.yougile_api_key, timeout=settings.http_timeout) if settings.yougile_api_key else None

    try:
        snapshot = record_and_push_metrics(
            commits,
            settings.github_ref,
            settings.project_name or settings.repository_name,
            settings.repository_name,
            settings.backend_url,
            environment=settings.environment,
            job_name=settings.job_name,
            bucket=settings.influxdb_bucket,
            github_token=settings.github_token,
            tracker_client=tracker,
            backend=settings.backend,
            owner=settings.owner,
            lookup_concurrency=settings.lookup_concurrency,
            timeout=settings.http_timeout,
        )
    except DeliveryError as e:
        # Metrics are best effort; the deployment itself already happened.
        logger.warning("Failed to push metrics: %s", e)
        return 0

    if snapshot is not None:
        logger.info("DORA metrics pushed: %s", ", ".join(snapshot.measurements))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        settings = load_settings()
        return run(args, settings)
    except (ConfigError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
