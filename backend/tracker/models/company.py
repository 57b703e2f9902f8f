"""Company ORM: an employer the user is tracking.

Invariants:
    - name is globally unique and non-nullable
    - excitement_level in [1, 5], defaults to 3
    - size / type hold CompanySize / CompanyType values or NULL

Design Decisions:
    - No child collections: jobs and contacts are found by company_id
"""

from sqlalchemy import CheckConstraint, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tracker.core.domain_types import DEFAULT_EXCITEMENT
from tracker.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    industry: Mapped[str | None] = mapped_column(String(255), nullable=True)
    size: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    year_founded: Mapped[int | None] = mapped_column(Integer, nullable=True)
    excitement_level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_EXCITEMENT,
    )
    glassdoor_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("excitement_level BETWEEN 1 AND 5", name="excitement_level"),
    )

    def __repr__(self) -> str:
        return f"Company(id={self.id!r}, name={self.name!r})"
