"""Unit-test fixtures: an in-memory ledger world and fake repositories over it."""

import pytest
from ledger_fakes import LedgerWorld, Repos


@pytest.fixture
def world() -> LedgerWorld:
    return LedgerWorld()


@pytest.fixture
def repos(world: LedgerWorld) -> Repos:
    return Repos(world)
