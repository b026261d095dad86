"""Pytest configuration and shared fakes."""
from typing import Dict, Iterable, Optional

import pytest

TOPIC_ID = "0.0.6624800"
UNKNOWN_ID = "0.0.99999999"


class FakeProbeClient:
    """In-memory stand-in for the mirror node client; records every lookup."""

    def __init__(
        self,
        accounts: Iterable[str] = (),
        tokens: Iterable[str] = (),
        topics: Iterable[str] = (),
        contracts: Iterable[str] = (),
        memos: Optional[Dict[str, str]] = None,
        error: Optional[Exception] = None,
    ):
        self.accounts = set(accounts)
        self.tokens = set(tokens)
        self.topics = set(topics)
        self.contracts = set(contracts)
        self.memos = memos or {}
        self.error = error
        self.calls = []

    async def _lookup(self, method: str, known: set, entity_id: str):
        self.calls.append((method, entity_id))
        if self.error is not None:
            raise self.error
        return {"id": entity_id} if entity_id in known else None

    async def get_account_balance(self, entity_id):
        return await self._lookup("get_account_balance", self.accounts, entity_id)

    async def get_token_info(self, entity_id):
        return await self._lookup("get_token_info", self.tokens, entity_id)

    async def get_topic_info(self, entity_id):
        result = await self._lookup("get_topic_info", self.topics, entity_id)
        if result is not None:
            result["memo"] = self.memos.get(entity_id, "")
        return result

    async def get_contract_info(self, entity_id):
        return await self._lookup("get_contract_info", self.contracts, entity_id)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_client():
    """Factory for FakeProbeClient instances."""
    return FakeProbeClient


@pytest.fixture
def topic_client():
    """Probe client that knows TOPIC_ID as a topic."""
    return FakeProbeClient(topics=[TOPIC_ID], memos={TOPIC_ID: "hcs-2:indexed"})


@pytest.fixture
def failing_client():
    """Probe client whose every lookup raises."""
    return FakeProbeClient(error=ConnectionError("mirror node unreachable"))


@pytest.fixture
def clock():
    return FakeClock()
