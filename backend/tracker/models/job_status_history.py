"""JobStatusHistory ORM: append-only audit trail of job status transitions.

Invariants:
    - Every job has >= 1 row; the first has old_status NULL
    - Rows are never updated; they disappear only with their job (ON DELETE CASCADE)
    - sequence counts 1, 2, 3, ... per job in insertion order
    - changed_at is read back as aware UTC

Design Decisions:
    - sequence breaks ties when two transitions share a changed_at timestamp
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base
from tracker.db.types import UTCDateTime


class JobStatusHistory(Base):
    __tablename__ = "job_status_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    old_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    new_status: Mapped[str] = mapped_column(String(30), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("job_id", "sequence", name="uq_job_status_history_job_sequence"),
    )

    def __repr__(self) -> str:
        return (
            f"JobStatusHistory(job_id={self.job_id!r}, "
            f"{self.old_status!r} -> {self.new_status!r})"
        )
