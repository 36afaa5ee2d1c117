from __future__ import annotations

from flask import Flask

from ..common.auth import current_actor_id, login_required
from ..common.http import bool_arg, int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import ApprovalStatus, EmploymentType, LeaveType
from ..workflow.approval import DecisionInput
from .model import EmployeeFilters, LeaveFilters

_EMPLOYEE_FIELDS = {
    "designation": "designation",
    "departmentId": "department_id",
    "campusId": "campus_id",
    "qualification": "qualification",
    "specialization": "specialization",
    "employmentType": "employment_type",
    "salary": "salary",
    "isActive": "is_active",
}


def register(app: Flask, container: Container) -> None:
    service = container.hr_service

    # -------- Employees --------
    @app.route("/api/v1/hr/employees", methods=["GET"], endpoint="hr_list_employees")
    @login_required
    def list_employees():
        employment_type = str_arg("employmentType")
        filters = EmployeeFilters(
            department_id=int_arg("departmentId"),
            designation=str_arg("designation"),
            employment_type=require_enum(employment_type, EmploymentType, "Employment type") if employment_type else None,
            is_active=bool_arg("isActive"),
        )
        page = service.list_employees(filters=filters, page=page_from_args())
        return paginated(page, "employees")

    @app.route("/api/v1/hr/employees/<int:employee_id>", methods=["GET"], endpoint="hr_get_employee")
    @login_required
    def get_employee(employee_id: int):
        return success(service.get_employee(employee_id))

    @app.route("/api/v1/hr/employees", methods=["POST"], endpoint="hr_create_employee")
    @login_required
    def create_employee():
        body = json_body()
        employee = service.create_employee(
            user_id=body.get("userId"),
            employee_code=body.get("employeeCode"),
            designation=body.get("designation"),
            joining_date=body.get("joiningDate"),
            department_id=body.get("departmentId"),
            campus_id=body.get("campusId"),
            qualification=body.get("qualification"),
            specialization=body.get("specialization"),
            employment_type=body.get("employmentType"),
            salary=body.get("salary"),
        )
        return success(employee, "Employee created successfully", 201)

    @app.route("/api/v1/hr/employees/<int:employee_id>", methods=["PUT"], endpoint="hr_update_employee")
    @login_required
    def update_employee(employee_id: int):
        body = json_body()
        changes = {column: body[key] for key, column in _EMPLOYEE_FIELDS.items() if key in body}
        return success(service.update_employee(employee_id, changes), "Employee updated successfully")

    @app.route(
        "/api/v1/hr/employees/<int:employee_id>/leave-balance", methods=["GET"], endpoint="hr_leave_balance"
    )
    @login_required
    def leave_balance(employee_id: int):
        return success(service.get_leave_balance(employee_id))

    # -------- Leave requests --------
    @app.route("/api/v1/hr/leave-requests", methods=["GET"], endpoint="hr_list_leave_requests")
    @login_required
    def list_leave_requests():
        status = str_arg("status")
        leave_type = str_arg("leaveType")
        filters = LeaveFilters(
            employee_id=int_arg("employeeId"),
            status=require_enum(status, ApprovalStatus, "Status") if status else None,
            leave_type=require_enum(leave_type, LeaveType, "Leave type") if leave_type else None,
        )
        page = service.list_leave_requests(filters=filters, page=page_from_args())
        return paginated(page, "leaveRequests")

    @app.route("/api/v1/hr/leave-requests/<int:request_id>", methods=["GET"], endpoint="hr_get_leave_request")
    @login_required
    def get_leave_request(request_id: int):
        return success(service.get_leave_request(request_id))

    @app.route("/api/v1/hr/leave-requests", methods=["POST"], endpoint="hr_submit_leave_request")
    @login_required
    def submit_leave_request():
        body = json_body()
        leave = service.submit_leave_request(
            employee_id=body.get("employeeId"),
            leave_type=body.get("leaveType"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
            reason=body.get("reason"),
        )
        return success(leave, "Leave request submitted successfully", 201)

    @app.route(
        "/api/v1/hr/leave-requests/<int:request_id>/approve", methods=["POST"], endpoint="hr_decide_leave_request"
    )
    @login_required
    def decide_leave_request(request_id: int):
        decision = DecisionInput.from_payload(json_body())
        leave = service.decide_leave_request(request_id=request_id, decision=decision, actor_id=current_actor_id())
        return success(leave, f"Leave request {decision.status} successfully")

    # -------- Recruitment --------
    @app.route("/api/v1/hr/job-postings", methods=["GET"], endpoint="hr_list_job_postings")
    @login_required
    def list_job_postings():
        page = service.list_job_postings(
            status=str_arg("status"), department_id=int_arg("departmentId"), page=page_from_args()
        )
        return paginated(page, "jobPostings")

    @app.route("/api/v1/hr/job-postings/<int:posting_id>", methods=["GET"], endpoint="hr_get_job_posting")
    @login_required
    def get_job_posting(posting_id: int):
        return success(service.get_job_posting(posting_id))

    @app.route("/api/v1/hr/job-postings", methods=["POST"], endpoint="hr_create_job_posting")
    @login_required
    def create_job_posting():
        body = json_body()
        posting = service.create_job_posting(
            title=body.get("title"),
            description=body.get("description"),
            deadline=body.get("deadline"),
            department_id=body.get("departmentId"),
            employment_type=body.get("employmentType"),
            positions=body.get("positions"),
            requirements=body.get("requirements"),
            status=body.get("status"),
            created_by=current_actor_id(),
        )
        return success(posting, "Job posting created successfully", 201)

    @app.route("/api/v1/hr/job-applications", methods=["GET"], endpoint="hr_list_job_applications")
    @login_required
    def list_job_applications():
        page = service.list_job_applications(
            posting_id=int_arg("jobPostingId"), status=str_arg("status"), page=page_from_args()
        )
        return paginated(page, "applications")

    @app.route("/api/v1/hr/job-applications", methods=["POST"], endpoint="hr_submit_job_application")
    @login_required
    def submit_job_application():
        body = json_body()
        application_id = service.submit_job_application(
            posting_id=body.get("jobPostingId"),
            applicant_name=body.get("applicantName"),
            applicant_email=body.get("applicantEmail"),
            applicant_cnic=body.get("applicantCnic"),
            applicant_phone=body.get("applicantPhone"),
            resume_url=body.get("resumeUrl"),
            cover_letter=body.get("coverLetter"),
        )
        return success({"application_id": application_id}, "Application submitted successfully", 201)
