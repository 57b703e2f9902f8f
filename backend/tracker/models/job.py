"""Job ORM: a saved job posting and where it stands in the pipeline.

Invariants:
    - company_id references an existing company (ON DELETE RESTRICT)
    - date_saved is set once by JobService.create and never updated; read back as aware UTC
    - salary_min <= salary_max whenever both are present
    - excitement_level in [1, 5]
    - Date-only fields (date_posted, date_applied, deadline, rejection_date,
      follow_up_date) are YYYY-MM-DD text

Design Decisions:
    - Enum-valued columns stored as their string value (e.g. "phone-screen")
    - status indexed: follow-up and filter queries select on it
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base
from tracker.db.types import UTCDateTime


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False, index=True,
    )
    job_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    application_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    job_type: Mapped[str] = mapped_column(String(20), nullable=False)
    seniority_level: Mapped[str] = mapped_column(String(20), nullable=False)
    salary_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    salary_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    date_posted: Mapped[str | None] = mapped_column(String(10), nullable=True)
    date_saved: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False,
    )
    date_applied: Mapped[str | None] = mapped_column(String(10), nullable=True)
    deadline: Mapped[str | None] = mapped_column(String(10), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    rejection_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    rejection_stage: Mapped[str | None] = mapped_column(String(100), nullable=True)
    excitement_level: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    follow_up_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    source: Mapped[str] = mapped_column(String(30), nullable=False)

    __table_args__ = (
        CheckConstraint("excitement_level BETWEEN 1 AND 5", name="excitement_level"),
        CheckConstraint(
            "salary_min IS NULL OR salary_max IS NULL OR salary_min <= salary_max",
            name="salary_range",
        ),
    )

    def __repr__(self) -> str:
        return f"Job(id={self.id!r}, job_title={self.job_title!r}, status={self.status!r})"
