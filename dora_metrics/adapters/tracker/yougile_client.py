from __future__ import annotations

from typing import Any, Dict, Optional

import requests

DEFAULT_BASE_URL = "https://ru.yougile.com/api-v2"


class YouGileClient:
    """Read-only YouGile access: fetch a task card by its identifier.

    Each call is a standalone request, so one client can serve several
    lookup threads at once.
    """

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0):
        if not api_key:
            raise ValueError("api_key is required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        response = requests.get(
            f"{self.base_url}/tasks/{task_id}",
            headers=self.headers,
            timeout=self.timeout,
        )
        if response.status_code == 404:
            return None

        response.raise_for_status()
        return response.json()
