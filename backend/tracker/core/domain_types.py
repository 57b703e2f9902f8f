"""Domain Types: identity types, enums and status sets shared across the tracker.

Invariants:
    - CompanyId, JobId, ContactId, HistoryId wrap opaque UUID4 strings, never reused
    - Every enum value is the lowercase-hyphenated string persisted in the database
    - Status sets are frozensets of enum members; membership is checked on the enum,
      never on ad-hoc string literals

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to their persisted string and serialize without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CompanyId = NewType("CompanyId", str)
JobId = NewType("JobId", str)
ContactId = NewType("ContactId", str)
HistoryId = NewType("HistoryId", str)


# ─── Value Bounds ────────────────────────────────────────────────

MIN_EXCITEMENT = 1
MAX_EXCITEMENT = 5
DEFAULT_EXCITEMENT = 3
MIN_GLASSDOOR_RATING = 1.0
MAX_GLASSDOOR_RATING = 5.0
MIN_YEAR_FOUNDED = 1800


# ─── Job Enums ───────────────────────────────────────────────────

class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    FREELANCE = "freelance"
    INTERNSHIP = "internship"


class SeniorityLevel(str, Enum):
    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    PRINCIPAL = "principal"
    DIRECTOR = "director"
    VP = "vp"
    C_LEVEL = "c-level"


class JobStatus(str, Enum):
    """Job pipeline states: maps to jobs.status and job_status_history columns."""
    SAVED = "saved"
    APPLIED = "applied"
    PHONE_SCREEN = "phone-screen"
    TECHNICAL_INTERVIEW = "technical-interview"
    ONSITE_INTERVIEW = "onsite-interview"
    FINAL_INTERVIEW = "final-interview"
    OFFER = "offer"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class JobSource(str, Enum):
    COMPANY_WEBSITE = "company-website"
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    GLASSDOOR = "glassdoor"
    ANGEL_LIST = "angel-list"
    REFERRAL = "referral"
    RECRUITER = "recruiter"
    OTHER = "other"


# ─── Company Enums ───────────────────────────────────────────────

class CompanySize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class CompanyType(str, Enum):
    STARTUP = "startup"
    PUBLIC = "public"
    PRIVATE = "private"
    NON_PROFIT = "non-profit"
    GOVERNMENT = "government"


# ─── Contact Enums ───────────────────────────────────────────────

class ContactRelationship(str, Enum):
    RECRUITER = "recruiter"
    HIRING_MANAGER = "hiring-manager"
    TEAM_MEMBER = "team-member"
    REFERRAL = "referral"
    NETWORKING = "networking"
    OTHER = "other"


class ContactGoal(str, Enum):
    REFERRAL = "referral"
    INFORMATION = "information"
    NETWORKING = "networking"
    FOLLOW_UP = "follow-up"
    OTHER = "other"


class ContactStatus(str, Enum):
    NOT_CONTACTED = "not-contacted"
    REACHED_OUT = "reached-out"
    RESPONDED = "responded"
    MEETING_SCHEDULED = "meeting-scheduled"
    MET = "met"
    ONGOING = "ongoing"
    CLOSED = "closed"


# ─── Status Sets ─────────────────────────────────────────────────

# Not yet closed out: counted as active on dashboards.
ACTIVE_JOB_STATUSES = frozenset({
    JobStatus.SAVED,
    JobStatus.APPLIED,
    JobStatus.PHONE_SCREEN,
    JobStatus.TECHNICAL_INTERVIEW,
    JobStatus.ONSITE_INTERVIEW,
    JobStatus.FINAL_INTERVIEW,
    JobStatus.OFFER,
})

# Still in motion: the only jobs that surface as follow-up reminders.
FOLLOW_UP_JOB_STATUSES = frozenset({
    JobStatus.APPLIED,
    JobStatus.PHONE_SCREEN,
    JobStatus.TECHNICAL_INTERVIEW,
    JobStatus.ONSITE_INTERVIEW,
    JobStatus.FINAL_INTERVIEW,
})

FOLLOW_UP_CONTACT_STATUSES = frozenset({
    ContactStatus.REACHED_OUT,
    ContactStatus.RESPONDED,
    ContactStatus.MEETING_SCHEDULED,
    ContactStatus.ONGOING,
})


def enum_value(value):
    """Return the persisted string for an enum member; pass anything else through."""
    if isinstance(value, Enum):
        return value.value
    return value
