"""Shared fixtures for poller tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from poller.src.Feed import Feed
from poller.src.Round import Round

ETH_ADDRESS = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"
BTC_ADDRESS = "0xF4030086522a5bEEa4988F8cA5B36dbC97BeE88c"
LINK_ADDRESS = "0x2c1d072e956AFFC0D435Cb7AC38EF18d24d9127c"


def build_round(identifier: str = "ETH", round_id: int = 10, **overrides: Any) -> Round:
    """Build a round with sensible defaults."""
    fields: dict[str, Any] = {
        "identifier": identifier,
        "round_id": round_id,
        "answered_in_round": round_id,
        "started_at": 1700000000,
        "updated_at": 1700000000,
        "answer": 2500.5,
    }
    fields.update(overrides)
    return Round(**fields)


class FakeClient:
    """Scripted contract client recording every call.

    Outcomes are scripted per identifier as a list consumed one per call;
    an exception is raised, a round is returned. Unscripted calls return a
    round whose round_id counts the calls for that identifier.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.outcomes: dict[str, list[Round | BaseException]] = {}
        self.delays: dict[str, float] = {}
        self._counts: dict[str, int] = {}

    def script(self, identifier: str, *outcomes: Round | BaseException) -> None:
        self.outcomes.setdefault(identifier, []).extend(outcomes)

    async def fetch(self, identifier: str, address: str) -> Round:
        self.calls.append(identifier)
        self._counts[identifier] = self._counts.get(identifier, 0) + 1

        delay = self.delays.get(identifier, 0.0)
        if delay:
            await asyncio.sleep(delay)

        pending = self.outcomes.get(identifier)
        if pending:
            outcome = pending.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return build_round(identifier, round_id=self._counts[identifier])


@pytest.fixture
def make_round():
    """Factory for rounds."""
    return build_round


@pytest.fixture
def fake_client() -> FakeClient:
    """Fresh scripted client."""
    return FakeClient()


@pytest.fixture
def feeds() -> tuple[Feed, ...]:
    """Three feeds in registry order."""
    return (
        Feed("ETH", ETH_ADDRESS),
        Feed("BTC", BTC_ADDRESS),
        Feed("LINK", LINK_ADDRESS),
    )
