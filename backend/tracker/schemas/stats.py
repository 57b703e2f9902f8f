"""Stats Schemas: aggregate views returned by the services' get_stats operations."""

from pydantic import BaseModel, Field


class CompanyStats(BaseModel):
    total_jobs: int = 0
    total_contacts: int = 0
    jobs_by_status: dict[str, int] = Field(default_factory=dict)


class JobStats(BaseModel):
    total_jobs: int = 0
    active_jobs: int = 0
    jobs_by_status: dict[str, int] = Field(default_factory=dict)
    average_excitement: float = 0.0


class ContactStats(BaseModel):
    """linked_jobs counts link rows; companies_worked_with counts distinct companies behind them."""
    linked_jobs: int = 0
    companies_worked_with: int = 0
