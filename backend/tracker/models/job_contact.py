"""JobContact ORM: junction row linking a contact to a job.

Invariants:
    - Identity is the composite (job_id, contact_id): at most one row per pair
    - Removed automatically when either the job or the contact is deleted
    - relationship_type is free text ("recruiter", "interviewer", ...)
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base


class JobContact(Base):
    __tablename__ = "job_contacts"

    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True,
    )
    contact_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("contacts.id", ondelete="CASCADE"),
        primary_key=True, index=True,
    )
    relationship_type: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return (
            f"JobContact(job_id={self.job_id!r}, contact_id={self.contact_id!r}, "
            f"relationship_type={self.relationship_type!r})"
        )
