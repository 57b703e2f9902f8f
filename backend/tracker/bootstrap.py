"""Tracker Bootstrap: builds the store handle and the services that share it.

Invariants:
    - One Store per open_tracker() call, created on entry and disposed on exit
    - Services never construct their own Store: they all receive the same handle
    - Startup fails fast (DatabaseError) if the required tables are missing

Design Decisions:
    - Async context manager lifecycle (init-once, teardown-on-shutdown) instead of a
      lazily created module-level handle
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from tracker.config import Settings, get_settings
from tracker.infrastructure.database import Store
from tracker.infrastructure.observability import setup_logging
from tracker.services.company_service import CompanyService
from tracker.services.contact_service import ContactService
from tracker.services.job_service import JobService
from tracker.services.service_helpers import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass
class Tracker:
    """The services a host process calls, bound to one store."""
    store: Store
    companies: CompanyService
    jobs: JobService
    contacts: ContactService


def build_tracker(store: Store, clock: Clock = utcnow) -> Tracker:
    return Tracker(
        store=store,
        companies=CompanyService(store, clock),
        jobs=JobService(store, clock),
        contacts=ContactService(store, clock),
    )


@asynccontextmanager
async def open_tracker(settings: Settings | None = None) -> AsyncIterator[Tracker]:
    """Startup/shutdown lifecycle for a host process."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    store = Store(
        settings.database_url,
        echo=settings.database_echo,
        busy_timeout_seconds=settings.database_busy_timeout_seconds,
    )
    try:
        if settings.create_schema_on_startup:
            await store.create_schema()
        await store.verify_integrity()
        logger.info("Job search tracker started")
        yield build_tracker(store)
    finally:
        logger.info("Job search tracker shutting down")
        await store.dispose()
