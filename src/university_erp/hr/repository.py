from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from ..core.enums import ApprovalStatus, JobPostingStatus
from .model import (
    Employee,
    EmployeeFilters,
    JobApplication,
    JobPosting,
    LeaveFilters,
    LeaveRequest,
    NewEmployee,
    NewJobApplication,
    NewJobPosting,
    NewLeaveRequest,
)


class HRRepository(Protocol):
    """Repository interface for HR data.

    Services depend on this interface, never on a concrete database.
    """

    # Employees
    def list_employees(self, filters: EmployeeFilters, page: Pagination) -> tuple[Sequence[Employee], int]:
        raise NotImplementedError

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_employee_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def create_employee(self, data: NewEmployee) -> int:
        raise NotImplementedError

    def update_employee(self, employee_id: int, changes: dict) -> bool:
        raise NotImplementedError

    # Leave requests
    def list_leave_requests(self, filters: LeaveFilters, page: Pagination) -> tuple[Sequence[LeaveRequest], int]:
        raise NotImplementedError

    def get_leave_request(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create_leave_request(self, data: NewLeaveRequest) -> int:
        raise NotImplementedError

    def save_leave_decision(self, decided: LeaveRequest, *, expected: ApprovalStatus) -> bool:
        """Persist a decided request only if it is still in ``expected`` status."""

        raise NotImplementedError

    def approved_leave_days(self, employee_id: int) -> dict[str, int]:
        """Sum of approved leave days keyed by leave type value."""

        raise NotImplementedError

    # Recruitment
    def list_job_postings(
        self, *, status: Optional[JobPostingStatus], department_id: Optional[int], page: Pagination
    ) -> tuple[Sequence[JobPosting], int]:
        raise NotImplementedError

    def get_job_posting(self, posting_id: int) -> Optional[JobPosting]:
        raise NotImplementedError

    def create_job_posting(self, data: NewJobPosting, *, created_by: Optional[int]) -> int:
        raise NotImplementedError

    def list_job_applications(
        self, *, posting_id: Optional[int], status: Optional[str], page: Pagination
    ) -> tuple[Sequence[JobApplication], int]:
        raise NotImplementedError

    def create_job_application(self, data: NewJobApplication) -> int:
        raise NotImplementedError
