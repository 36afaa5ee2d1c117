from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import (
    ApprovalStatus,
    EmploymentType,
    JobApplicationStatus,
    JobPostingStatus,
    LeaveType,
)


@dataclass(frozen=True)
class Employee:
    employee_id: int
    user_id: int
    employee_code: str
    designation: str
    joining_date: date
    department_id: Optional[int] = None
    campus_id: Optional[int] = None
    qualification: Optional[str] = None
    specialization: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    salary: Optional[Decimal] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    number_of_days: int
    reason: Optional[str]
    requested_date: date
    status: ApprovalStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LeaveBalance:
    employee_id: int
    annual_leave: int
    sick_leave: int
    casual_leave: int
    used_annual_leave: int
    used_sick_leave: int
    used_casual_leave: int
    remaining_annual_leave: int
    remaining_sick_leave: int
    remaining_casual_leave: int


@dataclass(frozen=True)
class JobPosting:
    posting_id: int
    title: str
    description: str
    deadline: date
    status: JobPostingStatus
    department_id: Optional[int] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    positions: int = 1
    requirements: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class JobApplication:
    application_id: int
    posting_id: int
    applicant_name: str
    applicant_email: str
    applicant_cnic: str
    status: JobApplicationStatus
    applicant_phone: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeFilters:
    department_id: Optional[int] = None
    designation: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class LeaveFilters:
    employee_id: Optional[int] = None
    status: Optional[ApprovalStatus] = None
    leave_type: Optional[LeaveType] = None


@dataclass(frozen=True)
class NewEmployee:
    user_id: int
    employee_code: str
    designation: str
    joining_date: date
    department_id: Optional[int] = None
    campus_id: Optional[int] = None
    qualification: Optional[str] = None
    specialization: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    salary: Optional[Decimal] = None


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    number_of_days: int
    reason: Optional[str]
    requested_date: date


@dataclass(frozen=True)
class NewJobPosting:
    title: str
    description: str
    deadline: date
    department_id: Optional[int] = None
    employment_type: EmploymentType = EmploymentType.PERMANENT
    positions: int = 1
    requirements: Optional[str] = None
    status: JobPostingStatus = JobPostingStatus.PUBLISHED


@dataclass(frozen=True)
class NewJobApplication:
    posting_id: int
    applicant_name: str
    applicant_email: str
    applicant_cnic: str
    applicant_phone: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None


EMPLOYEE_UPDATABLE = frozenset(
    {"designation", "department_id", "campus_id", "qualification", "specialization", "employment_type", "salary", "is_active"}
)
