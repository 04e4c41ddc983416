"""
Live smoke tests against a real Parse server.

Run with: python -m pytest tests/test_live.py -v
Requires: PARSE_APPLICATION_ID and PARSE_API_KEY (and PARSE_URL for a
self-hosted server), from the environment or the project .env file.

Each test cleans up the objects it creates.
"""

import os
import uuid

import pytest

from parse_client import ParseClient

pytestmark = pytest.mark.live

CLASS_NAME = "ParseClientSmokeTest"


@pytest.fixture(scope="module")
def live_client():
    """Skip if credentials are not available."""
    if not os.environ.get("PARSE_APPLICATION_ID") or not os.environ.get("PARSE_API_KEY"):
        pytest.skip("PARSE_APPLICATION_ID and PARSE_API_KEY required")
    return ParseClient()


def test_create_query_delete(live_client):
    marker = uuid.uuid4().hex
    created = live_client.objects.create(CLASS_NAME, {"marker": marker, "age": 2})
    try:
        result = live_client.objects.find(CLASS_NAME, {"marker": marker, "age": {"$lt": 3}}, count=True)
        assert [obj.object_id for obj in result] == [created.object_id]
        assert result.count == 1

        body = live_client.query(f"classes/{CLASS_NAME}", {"marker": marker, "age": {"$gt": 5}})
        assert body["results"] == []
    finally:
        assert live_client.objects.delete(CLASS_NAME, created.object_id).ok


def test_missing_object_is_a_response(live_client):
    response = live_client.get(f"classes/{CLASS_NAME}/doesNotExist")
    assert response.status_code == 404
    assert response.body["code"] == 101
