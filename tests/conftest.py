"""Pytest configuration - loads .env for live tests and provides a fake transport."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from parse_client.core.client import APIClient, TransportResult
from parse_client.core.types import Credentials

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class RecordingTransport:
    """Transport double: records every call and replays queued results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def queue(self, status=200, body=b"{}", headers=None):
        self.results.append(TransportResult(status=status, body=body, headers=headers or {}))

    def __call__(self, method, url, headers, body, options):
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body, "options": options})
        result = self.results.pop(0) if self.results else TransportResult(status=200, body=b"{}")
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def credentials():
    return Credentials(application_id="app-id", api_key="rest-key", base_url="https://parse.example.com/1")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def api(credentials, transport):
    return APIClient(credentials, transport=transport)
