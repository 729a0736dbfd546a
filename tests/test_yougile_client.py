from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from dora_metrics.adapters.tracker.yougile_client import YouGileClient

MODULE = "dora_metrics.adapters.tracker.yougile_client"


def response(status_code=200, payload=None):
    resp = MagicMock(status_code=status_code)
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return resp


@pytest.fixture
def client():
    return YouGileClient("key-123", base_url="https://yougile.test/api-v2/")


def test_requires_api_key():
    with pytest.raises(ValueError):
        YouGileClient("")


@patch(f"{MODULE}.requests.get")
def test_get_task(mock_get, client):
    mock_get.return_value = response(payload={"id": "TECH-1", "timestamp": 1})

    assert client.get_task("TECH-1") == {"id": "TECH-1", "timestamp": 1}
    mock_get.assert_called_once_with(
        "https://yougile.test/api-v2/tasks/TECH-1",
        headers={"Authorization": "Bearer key-123", "Content-Type": "application/json"},
        timeout=30.0,
    )


@patch(f"{MODULE}.requests.get")
def test_missing_task_is_none(mock_get, client):
    mock_get.return_value = response(404)
    assert client.get_task("TECH-404") is None


@patch(f"{MODULE}.requests.get")
def test_server_error_raises(mock_get, client):
    mock_get.return_value = response(500)
    with pytest.raises(requests.HTTPError):
        client.get_task("TECH-1")


@patch(f"{MODULE}.requests.get")
def test_concurrent_lookups_use_independent_requests(mock_get, client):
    mock_get.side_effect = lambda url, **kwargs: response(payload={"id": url.rsplit("/", 1)[-1]})
    task_ids = [f"TECH-{n}" for n in range(10)]

    with ThreadPoolExecutor(max_workers=5) as executor:
        tasks = list(executor.map(client.get_task, task_ids))

    assert [task["id"] for task in tasks] == task_ids
    assert mock_get.call_count == 10
