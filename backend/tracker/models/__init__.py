"""ORM Models: SQLAlchemy declarative models for the five tracker tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - Company is referenced by jobs and contacts with ON DELETE RESTRICT
    - job_contacts and job_status_history cascade with their parent job (and contact)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all runs
    - No ORM relationship() collections: Company never holds child lists, lookups
      traverse by foreign key, and returned rows stay usable after their session closes
"""

from tracker.models.company import Company  # noqa: F401
from tracker.models.job import Job  # noqa: F401
from tracker.models.contact import Contact  # noqa: F401
from tracker.models.job_contact import JobContact  # noqa: F401
from tracker.models.job_status_history import JobStatusHistory  # noqa: F401

REQUIRED_TABLES = (
    "companies", "jobs", "contacts", "job_contacts", "job_status_history",
)
