"""Job Filters: conjunctive filter intent accepted by JobService.find_by_filters.

Invariants:
    - A field set to None is left out of the conjunction
    - An empty list is the same as None (no constraint on that column)
    - List fields match any of their values (OR), fields combine with AND
"""

from pydantic import BaseModel, ConfigDict, Field

from tracker.core.domain_types import JobStatus, JobType, SeniorityLevel


class JobFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: list[JobStatus] | None = None
    company_id: str | None = None
    seniority_level: list[SeniorityLevel] | None = None
    job_type: list[JobType] | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    limit: int | None = Field(None, ge=1)
    offset: int | None = Field(None, ge=0)
