"""Service test fixtures: services bound to the per-test store and a ticking clock.

Invariants:
    - Every test gets a fresh SQLite database file (root conftest `store`)
    - All three services share one Store and one clock, as bootstrap wires them
"""

import pytest

from tests.factories import TickingClock, company_data
from tracker.bootstrap import build_tracker


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def tracker(store, clock):
    return build_tracker(store, clock)


@pytest.fixture
def companies(tracker):
    return tracker.companies


@pytest.fixture
def jobs(tracker):
    return tracker.jobs


@pytest.fixture
def contacts(tracker):
    return tracker.contacts


@pytest.fixture
async def company(companies):
    return await companies.create(company_data())
