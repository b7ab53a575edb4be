"""Shared fixtures for shopscan tests."""

from unittest.mock import Mock

import pytest


def build_response(
    status=200,
    text="",
    json_data=None,
    headers=None,
    url=None,
    reason="OK",
):
    """Build a stand-in for requests.Response."""
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    response.text = text
    response.headers = headers or {}
    response.url = url
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


@pytest.fixture
def make_response():
    """Factory for fake HTTP responses."""
    return build_response


@pytest.fixture
def session():
    """Mock HTTP session; no test touches the network."""
    return Mock()


class FakeClock:
    """Monotonic clock that only moves when sleep is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
