from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ApplicationStatus


@dataclass(frozen=True)
class AdmissionApplication:
    application_id: int
    application_number: str
    user_id: int
    program_id: int
    batch: str
    status: ApplicationStatus
    applicant_name: Optional[str] = None
    eligibility_score: Optional[Decimal] = None
    merit_rank: Optional[int] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewApplication:
    application_number: str
    user_id: int
    program_id: int
    batch: str
    applicant_name: Optional[str] = None


@dataclass(frozen=True)
class EligibilityCriteria:
    criteria_id: int
    program_id: int
    minimum_marks: Optional[Decimal] = None
    minimum_cgpa: Optional[Decimal] = None
    age_limit: Optional[int] = None


@dataclass(frozen=True)
class EligibilityResult:
    application_id: int
    eligible: bool
    score: Decimal
    reasons: list[str] = field(default_factory=list)
    criteria: Optional[EligibilityCriteria] = None


@dataclass(frozen=True)
class MeritEntry:
    application_id: int
    application_number: str
    applicant_name: Optional[str]
    merit_score: Decimal
    rank: int
    status: ApplicationStatus


@dataclass(frozen=True)
class MeritList:
    merit_list_id: int
    program_id: int
    batch: str
    total_seats: int
    published_date: date
    entries: list[MeritEntry] = field(default_factory=list)
