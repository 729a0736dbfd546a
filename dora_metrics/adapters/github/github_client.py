from __future__ import annotations

from dataclasses import dataclass
import logging
import random
import time
from datetime import datetime
from typing import Any, Dict, Optional

import requests
from requests import Response
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout as RequestsTimeout

from ...domain.models import PullRequestInfo
from ...domain.time_utils import parse_github_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitHubClient:
    """Small helper around the GitHub REST API with sane defaults.

    Implements the PullRequestLookup port for one repository.
    """

    owner: str
    repo: str
    token: str

    base_url: str = "https://api.github.com"

    max_retries: int = 3
    backoff_seconds: float = 1.0
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not (self.owner and self.repo and self.token):
            raise ValueError("owner, repo, and token are required")

    @property
    def rest_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": "dora-metrics-exporter",
        }

    def rest_get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._request_with_retries(
            method="GET",
            url=f"{self.base_url}{path}",
            headers=self.rest_headers,
            params=params or {},
            timeout=self.timeout,
        )
        return resp.json()

    def find_pull_request(self, commit_sha: str) -> Optional[PullRequestInfo]:
        pulls = self.rest_get(f"/repos/{self.owner}/{self.repo}/commits/{commit_sha}/pulls")
        if not pulls:
            return None

        pr = pulls[0]
        created_raw = pr.get("created_at")
        return PullRequestInfo(
            number=pr["number"],
            created_at=parse_github_datetime(created_raw) if created_raw else None,
        )

    def first_commit_time(self, pull_request: PullRequestInfo) -> Optional[datetime]:
        commits = self.rest_get(
            f"/repos/{self.owner}/{self.repo}/pulls/{pull_request.number}/commits",
            params={"per_page": 100},
        )
        if not commits:
            return None

        commit = commits[0].get("commit") or {}
        author = commit.get("author") or {}
        committer = commit.get("committer") or {}
        date_raw = author.get("date") or committer.get("date")
        if not date_raw:
            return None
        return parse_github_datetime(date_raw)

    def _request_with_retries(
        self,
        *,
        method: str,
        url: str,
        headers: Dict[str, str],
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
    ) -> Response:
        last_exc: Optional[BaseException] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = requests.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    timeout=timeout,
                )

                if resp.status_code in (429, 500, 502, 503, 504):
                    if attempt >= self.max_retries:
                        resp.raise_for_status()

                    retry_after = resp.headers.get("Retry-After")
                    if retry_after and retry_after.isdigit():
                        sleep_seconds = float(retry_after)
                    else:
                        sleep_seconds = (self.backoff_seconds * (2 ** (attempt - 1))) + random.uniform(
                            0.0, 0.25
                        )

                    logger.debug("GitHub returned %s for %s, retrying in %.1fs", resp.status_code, url, sleep_seconds)
                    time.sleep(sleep_seconds)
                    continue

                resp.raise_for_status()
                return resp
            except (RequestsConnectionError, RequestsTimeout) as exc:
                last_exc = exc
                if attempt >= self.max_retries:
                    raise

                sleep_seconds = (self.backoff_seconds * (2 ** (attempt - 1))) + random.uniform(
                    0.0, 0.25
                )
                time.sleep(sleep_seconds)

        if last_exc:
            raise last_exc

        raise RuntimeError("Request failed unexpectedly")


def default_client(token: Optional[str], repository: Optional[str], *, timeout: float = 30.0) -> GitHubClient:
    """Build a client from a token and an 'owner/repo' string."""
    token = (token or "").strip()
    repository = (repository or "").strip()

    if not token:
        raise RuntimeError("A GitHub token is required to resolve pull requests.")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise RuntimeError(f"Repository must be in owner/repo format, got {repository!r}.")

    return GitHubClient(owner=owner, repo=repo, token=token, timeout=timeout)
