"""Pytest configuration and fixtures."""

from __future__ import annotations

import threading
from typing import Any, Mapping

import pytest

from zenvalidator.config import EngineConfig
from zenvalidator.constraints import ConstraintSet, ValidationContext
from zenvalidator.errors import RemoteUnavailableError


class FakeHttpCaller:
    """Records calls and answers with canned (status, body) responses."""

    def __init__(self, responses: Mapping[str, tuple[int, str]] | None = None, default: tuple[int, str] = (200, "1")):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def call(self, url: str, method: str, params: Mapping[str, Any], timeout: float) -> tuple[int, str]:
        with self._lock:
            self.calls.append({"url": url, "method": method, "params": dict(params), "timeout": timeout})
        return self.responses.get(url, self.default)


class DownHttpCaller:
    """Every call fails as if the endpoint were unreachable."""

    def __init__(self) -> None:
        self.calls = 0

    def call(self, url: str, method: str, params: Mapping[str, Any], timeout: float) -> tuple[int, str]:
        self.calls += 1
        raise RemoteUnavailableError("Remote validation connection error: [Errno 111] Connection refused")


class RaisingHttpCaller:
    """Raises the given exception, as a third-party client would on a network error."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def call(self, url: str, method: str, params: Mapping[str, Any], timeout: float) -> tuple[int, str]:
        raise self.error


@pytest.fixture
def fake_http() -> FakeHttpCaller:
    return FakeHttpCaller()


@pytest.fixture
def constraint_set(fake_http: FakeHttpCaller) -> ConstraintSet:
    """Empty set wired to the fake HTTP caller."""
    return ConstraintSet(EngineConfig(base_url="https://forms.example.com"), http=fake_http)


@pytest.fixture
def empty_context() -> ValidationContext:
    return ValidationContext.from_values({})
