from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.pagination import Pagination
from ..core.enums import (
    ApprovalStatus,
    EmploymentType,
    JobApplicationStatus,
    JobPostingStatus,
    LeaveType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import (
    EMPLOYEE_UPDATABLE,
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
from .repository import HRRepository

_EMPLOYEE_COLUMNS = """
    employee_id, user_id, employee_code, department_id, campus_id, designation,
    qualification, specialization, joining_date, employment_type, salary, is_active, created_at
"""

_LEAVE_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, number_of_days, reason,
    requested_date, status, approved_by, approved_at, rejection_reason, remarks, created_at
"""

_POSTING_COLUMNS = """
    posting_id, title, description, department_id, employment_type, positions,
    requirements, deadline, status, created_by, created_at
"""

_APPLICATION_COLUMNS = """
    application_id, posting_id, applicant_name, applicant_email, applicant_phone,
    applicant_cnic, resume_url, cover_letter, status, created_at
"""


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        user_id=int(row["user_id"]),
        employee_code=row["employee_code"],
        designation=row["designation"],
        joining_date=row["joining_date"],
        department_id=row.get("department_id"),
        campus_id=row.get("campus_id"),
        qualification=row.get("qualification"),
        specialization=row.get("specialization"),
        employment_type=EmploymentType(row["employment_type"]),
        salary=Decimal(row["salary"]) if row.get("salary") is not None else None,
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


def _to_leave(row: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(row["request_id"]),
        employee_id=int(row["employee_id"]),
        leave_type=LeaveType(row["leave_type"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        number_of_days=int(row["number_of_days"]),
        reason=row.get("reason"),
        requested_date=row["requested_date"],
        status=ApprovalStatus(row["status"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
    )


def _to_posting(row: dict) -> JobPosting:
    return JobPosting(
        posting_id=int(row["posting_id"]),
        title=row["title"],
        description=row["description"],
        deadline=row["deadline"],
        status=JobPostingStatus(row["status"]),
        department_id=row.get("department_id"),
        employment_type=EmploymentType(row["employment_type"]),
        positions=int(row.get("positions") or 1),
        requirements=row.get("requirements"),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
    )


def _to_application(row: dict) -> JobApplication:
    return JobApplication(
        application_id=int(row["application_id"]),
        posting_id=int(row["posting_id"]),
        applicant_name=row["applicant_name"],
        applicant_email=row["applicant_email"],
        applicant_cnic=row["applicant_cnic"],
        status=JobApplicationStatus(row["status"]),
        applicant_phone=row.get("applicant_phone"),
        resume_url=row.get("resume_url"),
        cover_letter=row.get("cover_letter"),
        created_at=row.get("created_at"),
    )


class MySQLHRRepository(HRRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Employees --------
    def list_employees(self, filters: EmployeeFilters, page: Pagination) -> tuple[Sequence[Employee], int]:
        where, params = where_clause(
            [
                ("department_id", filters.department_id),
                ("designation", filters.designation),
                ("employment_type", filters.employment_type),
                ("is_active", None if filters.is_active is None else int(filters.is_active)),
            ]
        )
        with db_transaction(self._conn_factory, "fetch employees") as cur:
            total = count(cur, "employees", where, params)
            cur.execute(
                f"""
                SELECT {_EMPLOYEE_COLUMNS}
                FROM employees
                WHERE {where}
                ORDER BY created_at DESC, employee_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_employee(r) for r in fetchall(cur)], total

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with db_transaction(self._conn_factory, "fetch employee") as cur:
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_employee_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_transaction(self._conn_factory, "fetch employee") as cur:
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def create_employee(self, data: NewEmployee) -> int:
        with db_transaction(self._conn_factory, "create employee") as cur:
            cur.execute(
                """
                INSERT INTO employees(
                    user_id, employee_code, department_id, campus_id, designation, qualification,
                    specialization, joining_date, employment_type, salary, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    data.user_id,
                    data.employee_code,
                    data.department_id,
                    data.campus_id,
                    data.designation,
                    data.qualification,
                    data.specialization,
                    data.joining_date,
                    data.employment_type.value,
                    data.salary,
                ),
            )
            return int(cur.lastrowid)

    def update_employee(self, employee_id: int, changes: dict) -> bool:
        columns = [c for c in changes if c in EMPLOYEE_UPDATABLE]
        if not columns:
            return False
        assignments = ", ".join(f"{c}=%s" for c in columns)
        values = [getattr(changes[c], "value", changes[c]) for c in columns]
        with db_transaction(self._conn_factory, "update employee") as cur:
            cur.execute(
                f"UPDATE employees SET {assignments}, updated_at=NOW() WHERE employee_id=%s",
                (*values, int(employee_id)),
            )
            return cur.rowcount > 0

    # -------- Leave requests --------
    def list_leave_requests(self, filters: LeaveFilters, page: Pagination) -> tuple[Sequence[LeaveRequest], int]:
        where, params = where_clause(
            [
                ("employee_id", filters.employee_id),
                ("status", filters.status),
                ("leave_type", filters.leave_type),
            ]
        )
        with db_transaction(self._conn_factory, "fetch leave requests") as cur:
            total = count(cur, "leave_requests", where, params)
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY requested_date DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_leave(r) for r in fetchall(cur)], total

    def get_leave_request(self, request_id: int) -> Optional[LeaveRequest]:
        with db_transaction(self._conn_factory, "fetch leave request") as cur:
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            row = fetchone(cur)
            return _to_leave(row) if row else None

    def create_leave_request(self, data: NewLeaveRequest) -> int:
        with db_transaction(self._conn_factory, "create leave request") as cur:
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, number_of_days, reason, requested_date, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.employee_id,
                    data.leave_type.value,
                    data.start_date,
                    data.end_date,
                    data.number_of_days,
                    data.reason,
                    data.requested_date,
                    ApprovalStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def save_leave_decision(self, decided: LeaveRequest, *, expected: ApprovalStatus) -> bool:
        with db_transaction(self._conn_factory, "update leave request status") as cur:
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s, remarks=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    decided.status.value,
                    decided.approved_by,
                    decided.approved_at,
                    decided.rejection_reason,
                    decided.remarks,
                    decided.request_id,
                    expected.value,
                ),
            )
            return cur.rowcount == 1

    def approved_leave_days(self, employee_id: int) -> dict[str, int]:
        with db_transaction(self._conn_factory, "fetch leave balance") as cur:
            cur.execute(
                """
                SELECT leave_type, COALESCE(SUM(number_of_days), 0) AS used_days
                FROM leave_requests
                WHERE employee_id=%s AND status=%s
                GROUP BY leave_type
                """,
                (int(employee_id), ApprovalStatus.APPROVED.value),
            )
            return {r["leave_type"]: int(r["used_days"]) for r in fetchall(cur)}

    # -------- Recruitment --------
    def list_job_postings(
        self, *, status: Optional[JobPostingStatus], department_id: Optional[int], page: Pagination
    ) -> tuple[Sequence[JobPosting], int]:
        where, params = where_clause([("status", status), ("department_id", department_id)])
        with db_transaction(self._conn_factory, "fetch job postings") as cur:
            total = count(cur, "job_postings", where, params)
            cur.execute(
                f"""
                SELECT {_POSTING_COLUMNS}
                FROM job_postings
                WHERE {where}
                ORDER BY created_at DESC, posting_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_posting(r) for r in fetchall(cur)], total

    def get_job_posting(self, posting_id: int) -> Optional[JobPosting]:
        with db_transaction(self._conn_factory, "fetch job posting") as cur:
            cur.execute(f"SELECT {_POSTING_COLUMNS} FROM job_postings WHERE posting_id=%s", (int(posting_id),))
            row = fetchone(cur)
            return _to_posting(row) if row else None

    def create_job_posting(self, data: NewJobPosting, *, created_by: Optional[int]) -> int:
        with db_transaction(self._conn_factory, "create job posting") as cur:
            cur.execute(
                """
                INSERT INTO job_postings(
                    title, description, department_id, employment_type, positions,
                    requirements, deadline, status, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.title,
                    data.description,
                    data.department_id,
                    data.employment_type.value,
                    data.positions,
                    data.requirements,
                    data.deadline,
                    data.status.value,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def list_job_applications(
        self, *, posting_id: Optional[int], status: Optional[str], page: Pagination
    ) -> tuple[Sequence[JobApplication], int]:
        where, params = where_clause([("posting_id", posting_id), ("status", status)])
        with db_transaction(self._conn_factory, "fetch job applications") as cur:
            total = count(cur, "job_applications", where, params)
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM job_applications
                WHERE {where}
                ORDER BY created_at DESC, application_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_application(r) for r in fetchall(cur)], total

    def create_job_application(self, data: NewJobApplication) -> int:
        with db_transaction(self._conn_factory, "submit job application") as cur:
            cur.execute(
                """
                INSERT INTO job_applications(
                    posting_id, applicant_name, applicant_email, applicant_phone,
                    applicant_cnic, resume_url, cover_letter, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.posting_id,
                    data.applicant_name,
                    data.applicant_email,
                    data.applicant_phone,
                    data.applicant_cnic,
                    data.resume_url,
                    data.cover_letter,
                    JobApplicationStatus.SUBMITTED.value,
                ),
            )
            return int(cur.lastrowid)
