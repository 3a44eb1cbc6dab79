"""Shared fixtures for extrased tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from extrased.engine import Engine
from extrased.mock import MockDocsTransport, make_document, paragraph
from extrased.retry import RetryPolicy


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def policy(sleeps: SleepRecorder) -> RetryPolicy:
    return RetryPolicy(max_retries=3, sleep=sleeps)


@pytest.fixture
def docs() -> Callable[..., MockDocsTransport]:
    """Build a mock transport whose body holds one paragraph per line."""

    def build(*lines: str) -> MockDocsTransport:
        return MockDocsTransport(make_document(*(paragraph(line + "\n") for line in lines)))

    return build


@pytest.fixture
def engine_for(policy: RetryPolicy) -> Callable[[MockDocsTransport], Engine]:
    def build(transport: MockDocsTransport) -> Engine:
        return Engine(transport, retry_policy=policy)

    return build
