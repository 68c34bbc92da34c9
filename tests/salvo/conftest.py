from __future__ import annotations

import random

import pytest

from salvo.game.app.match_service import MatchService
from salvo.game.core.models import PlacementMap
from salvo.game.infra.store import InMemoryStateStore
from tests.salvo.helpers import FakeAuthority, make_row_layout


@pytest.fixture
def row_layout() -> PlacementMap:
    return make_row_layout()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1337)


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def service(store: InMemoryStateStore) -> MatchService:
    return MatchService(store)


@pytest.fixture
def authority() -> FakeAuthority:
    return FakeAuthority()


@pytest.fixture
def remote_service(store: InMemoryStateStore, authority: FakeAuthority) -> MatchService:
    return MatchService(store, authority)
