from __future__ import annotations

from flask import Flask

from ..common.auth import current_actor_id, login_required
from ..common.http import int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.admission_service

    @app.route("/api/v1/admission/applications", methods=["GET"], endpoint="admission_list_applications")
    @login_required
    def list_applications():
        page = service.list_applications(
            program_id=int_arg("programId"),
            user_id=int_arg("userId"),
            batch=str_arg("batch"),
            status=str_arg("status"),
            page=page_from_args(),
        )
        return paginated(page, "applications")

    @app.route(
        "/api/v1/admission/applications/<int:application_id>", methods=["GET"], endpoint="admission_get_application"
    )
    @login_required
    def get_application(application_id: int):
        return success(service.get_application(application_id))

    @app.route("/api/v1/admission/applications", methods=["POST"], endpoint="admission_submit_application")
    @login_required
    def submit_application():
        body = json_body()
        application = service.submit_application(
            user_id=body.get("userId") or current_actor_id(),
            program_id=body.get("programId"),
            batch=body.get("batch"),
            applicant_name=body.get("applicantName"),
        )
        return success(application, "Application submitted successfully", 201)

    @app.route(
        "/api/v1/admission/applications/<int:application_id>/status",
        methods=["PUT"],
        endpoint="admission_update_status",
    )
    @login_required
    def update_status(application_id: int):
        body = json_body()
        application = service.update_application_status(
            application_id=application_id, status=body.get("status"), actor_id=current_actor_id()
        )
        return success(application, "Application status updated")

    @app.route("/api/v1/admission/eligibility-check", methods=["POST"], endpoint="admission_eligibility_check")
    @login_required
    def eligibility_check():
        body = json_body()
        result = service.check_eligibility(
            application_id=body.get("applicationId"),
            marks=body.get("marks"),
            cgpa=body.get("cgpa"),
            entry_test=body.get("entryTest"),
            interview=body.get("interview"),
            qualification_year=body.get("qualificationYear"),
        )
        return success(result)

    @app.route("/api/v1/admission/merit-list", methods=["POST"], endpoint="admission_generate_merit_list")
    @login_required
    def generate_merit_list():
        body = json_body()
        merit_list = service.generate_merit_list(
            program_id=body.get("programId"),
            batch=body.get("batch"),
            total_seats=body.get("totalSeats"),
            actor_id=current_actor_id(),
        )
        return success(merit_list, "Merit list generated successfully", 201)
