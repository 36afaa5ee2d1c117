from __future__ import annotations

import logging
import re
from typing import Any, Optional

from ..common.datetime_utils import inclusive_days, today_local
from ..common.pagination import Page, Pagination
from ..common.validators import (
    optional_text,
    parse_amount,
    require_cnic,
    require_date,
    require_enum,
    require_id,
    require_non_empty,
)
from ..core.constants import ANNUAL_LEAVE_QUOTA, CASUAL_LEAVE_QUOTA, SICK_LEAVE_QUOTA
from ..core.enums import EmploymentType, JobPostingStatus, LeaveType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..workflow.approval import DecisionInput, decide
from .model import (
    EMPLOYEE_UPDATABLE,
    Employee,
    EmployeeFilters,
    JobApplication,
    JobPosting,
    LeaveBalance,
    LeaveFilters,
    LeaveRequest,
    NewEmployee,
    NewJobApplication,
    NewJobPosting,
    NewLeaveRequest,
)
from .repository import HRRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class HRService:
    def __init__(self, repo: HRRepository):
        self._repo = repo

    # -------- Employees --------
    def list_employees(self, *, filters: EmployeeFilters, page: Pagination) -> Page[Employee]:
        items, total = self._repo.list_employees(filters, page)
        return Page(items=items, total=total, pagination=page)

    def get_employee(self, employee_id: int) -> Employee:
        employee = self._repo.get_employee(int(employee_id))
        if not employee:
            raise NotFoundError("Employee")
        return employee

    def create_employee(
        self,
        *,
        user_id: Any,
        employee_code: Optional[str],
        designation: Optional[str],
        joining_date: Any,
        department_id: Any = None,
        campus_id: Any = None,
        qualification: Optional[str] = None,
        specialization: Optional[str] = None,
        employment_type: Any = None,
        salary: Any = None,
    ) -> Employee:
        data = NewEmployee(
            user_id=require_id(user_id, "User ID"),
            employee_code=require_non_empty(employee_code, "Employee code"),
            designation=require_non_empty(designation, "Designation"),
            joining_date=require_date(joining_date, "Joining date"),
            department_id=require_id(department_id, "Department ID") if department_id else None,
            campus_id=require_id(campus_id, "Campus ID") if campus_id else None,
            qualification=optional_text(qualification),
            specialization=optional_text(specialization),
            employment_type=(
                require_enum(employment_type, EmploymentType, "Employment type")
                if employment_type
                else EmploymentType.PERMANENT
            ),
            salary=parse_amount(salary, "Salary") if salary not in (None, "") else None,
        )
        if self._repo.get_employee_by_code(data.employee_code):
            raise ConflictError("Employee code already exists")

        employee_id = self._repo.create_employee(data)
        logger.info("Created employee %s (%s)", employee_id, data.employee_code)
        return self.get_employee(employee_id)

    def update_employee(self, employee_id: int, changes: dict) -> Employee:
        self.get_employee(employee_id)
        cleaned: dict[str, Any] = {}
        for key, value in changes.items():
            if key not in EMPLOYEE_UPDATABLE:
                continue
            if key == "designation":
                value = require_non_empty(value, "Designation")
            elif key == "employment_type":
                value = require_enum(value, EmploymentType, "Employment type")
            elif key == "salary":
                value = parse_amount(value, "Salary")
            elif key == "is_active":
                value = bool(value)
            elif key in ("department_id", "campus_id"):
                value = require_id(value, key.replace("_id", "").capitalize() + " ID") if value else None
            else:
                value = optional_text(value)
            cleaned[key] = value
        if not cleaned:
            raise ValidationError("No valid fields to update")

        self._repo.update_employee(int(employee_id), cleaned)
        return self.get_employee(employee_id)

    # -------- Leave requests --------
    def list_leave_requests(self, *, filters: LeaveFilters, page: Pagination) -> Page[LeaveRequest]:
        items, total = self._repo.list_leave_requests(filters, page)
        return Page(items=items, total=total, pagination=page)

    def get_leave_request(self, request_id: int) -> LeaveRequest:
        leave = self._repo.get_leave_request(int(request_id))
        if not leave:
            raise NotFoundError("Leave request")
        return leave

    def submit_leave_request(
        self,
        *,
        employee_id: Any,
        leave_type: Any,
        start_date: Any,
        end_date: Any,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        emp_id = require_id(employee_id, "Employee ID")
        kind = require_enum(leave_type, LeaveType, "Leave type")
        start = require_date(start_date, "Start date")
        end = require_date(end_date, "End date")

        today = today_local()
        if end < start:
            raise ValidationError("End date must be on or after start date")
        if start < today:
            raise ValidationError("Start date cannot be in the past")

        self.get_employee(emp_id)
        request_id = self._repo.create_leave_request(
            NewLeaveRequest(
                employee_id=emp_id,
                leave_type=kind,
                start_date=start,
                end_date=end,
                number_of_days=inclusive_days(start, end),
                reason=optional_text(reason),
                requested_date=today,
            )
        )
        logger.info("Employee %s submitted %s leave request %s", emp_id, kind.value, request_id)
        return self.get_leave_request(request_id)

    def decide_leave_request(self, *, request_id: int, decision: DecisionInput, actor_id: int) -> LeaveRequest:
        current = self.get_leave_request(request_id)
        decided = decide(
            current,
            to=decision.status,
            actor_id=actor_id,
            subject="leave requests",
            remarks=decision.remarks,
            rejection_reason=decision.rejection_reason,
        )
        if not self._repo.save_leave_decision(decided, expected=current.status):
            raise ConflictError("Leave request was already processed by another user")
        return decided

    def get_leave_balance(self, employee_id: int) -> LeaveBalance:
        self.get_employee(employee_id)
        used = self._repo.approved_leave_days(int(employee_id))
        used_annual = used.get(LeaveType.ANNUAL.value, 0)
        used_sick = used.get(LeaveType.SICK.value, 0)
        used_casual = used.get(LeaveType.CASUAL.value, 0)
        return LeaveBalance(
            employee_id=int(employee_id),
            annual_leave=ANNUAL_LEAVE_QUOTA,
            sick_leave=SICK_LEAVE_QUOTA,
            casual_leave=CASUAL_LEAVE_QUOTA,
            used_annual_leave=used_annual,
            used_sick_leave=used_sick,
            used_casual_leave=used_casual,
            remaining_annual_leave=max(0, ANNUAL_LEAVE_QUOTA - used_annual),
            remaining_sick_leave=max(0, SICK_LEAVE_QUOTA - used_sick),
            remaining_casual_leave=max(0, CASUAL_LEAVE_QUOTA - used_casual),
        )

    # -------- Recruitment --------
    def list_job_postings(
        self, *, status: Any = None, department_id: Any = None, page: Pagination
    ) -> Page[JobPosting]:
        items, total = self._repo.list_job_postings(
            status=require_enum(status, JobPostingStatus, "Status") if status else None,
            department_id=int(department_id) if department_id else None,
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def get_job_posting(self, posting_id: int) -> JobPosting:
        posting = self._repo.get_job_posting(int(posting_id))
        if not posting:
            raise NotFoundError("Job posting")
        return posting

    def create_job_posting(
        self,
        *,
        title: Optional[str],
        description: Optional[str],
        deadline: Any,
        department_id: Any = None,
        employment_type: Any = None,
        positions: Any = None,
        requirements: Optional[str] = None,
        status: Any = None,
        created_by: Optional[int] = None,
    ) -> JobPosting:
        close_date = require_date(deadline, "Deadline")
        if close_date <= today_local():
            raise ValidationError("Deadline must be in the future")
        try:
            openings = int(positions) if positions not in (None, "") else 1
        except (TypeError, ValueError):
            raise ValidationError("Positions must be a number")
        if openings < 1:
            raise ValidationError("Positions must be at least 1")

        data = NewJobPosting(
            title=require_non_empty(title, "Title"),
            description=require_non_empty(description, "Description"),
            deadline=close_date,
            department_id=require_id(department_id, "Department ID") if department_id else None,
            employment_type=(
                require_enum(employment_type, EmploymentType, "Employment type")
                if employment_type
                else EmploymentType.PERMANENT
            ),
            positions=openings,
            requirements=optional_text(requirements),
            status=require_enum(status, JobPostingStatus, "Status") if status else JobPostingStatus.PUBLISHED,
        )
        posting_id = self._repo.create_job_posting(data, created_by=created_by)
        logger.info("Created job posting %s", posting_id)
        return self.get_job_posting(posting_id)

    def list_job_applications(
        self, *, posting_id: Any = None, status: Optional[str] = None, page: Pagination
    ) -> Page[JobApplication]:
        items, total = self._repo.list_job_applications(
            posting_id=int(posting_id) if posting_id else None,
            status=optional_text(status),
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def submit_job_application(
        self,
        *,
        posting_id: Any,
        applicant_name: Optional[str],
        applicant_email: Optional[str],
        applicant_cnic: Optional[str],
        applicant_phone: Optional[str] = None,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None,
    ) -> int:
        posting = self.get_job_posting(require_id(posting_id, "Job posting ID"))
        if posting.status != JobPostingStatus.PUBLISHED:
            raise ValidationError("Job posting is not accepting applications")
        if posting.deadline < today_local():
            raise ValidationError("Application deadline has passed")

        email = require_non_empty(applicant_email, "Email")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email address")

        application_id = self._repo.create_job_application(
            NewJobApplication(
                posting_id=posting.posting_id,
                applicant_name=require_non_empty(applicant_name, "Applicant name"),
                applicant_email=email,
                applicant_cnic=require_cnic(applicant_cnic),
                applicant_phone=optional_text(applicant_phone),
                resume_url=optional_text(resume_url),
                cover_letter=optional_text(cover_letter),
            )
        )
        logger.info("Job application %s submitted for posting %s", application_id, posting.posting_id)
        return application_id
