from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..domain.models import PullRequestInfo


class PullRequestLookup(Protocol):
    """Port used by the lead time calculation to find where work started.

    This keeps the domain layer independent of a specific GitHub client
    implementation (REST library, retries, etc.).
    """

    def find_pull_request(self, commit_sha: str) -> Optional[PullRequestInfo]:
        ...

    def first_commit_time(self, pull_request: PullRequestInfo) -> Optional[datetime]:
        ...
