from __future__ import annotations

from flask import Flask, request

from ..common.auth import current_actor_id, login_required
from ..common.http import bool_arg, int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import TransferStatus
from ..workflow.approval import DecisionInput
from .model import TransferFilters

_CAMPUS_FIELDS = {
    "name": "name",
    "code": "code",
    "address": "address",
    "city": "city",
    "province": "province",
    "phone": "phone",
    "email": "email",
    "isActive": "is_active",
}


def _transfer_filters(subject_param: str) -> TransferFilters:
    status = str_arg("status")
    return TransferFilters(
        subject_id=int_arg(subject_param),
        from_campus_id=int_arg("fromCampusId"),
        to_campus_id=int_arg("toCampusId"),
        status=require_enum(status, TransferStatus, "Status") if status else None,
    )


def register(app: Flask, container: Container) -> None:
    service = container.multicampus_service

    # -------- Campuses --------
    @app.route("/api/v1/multicampus/campuses", methods=["GET"], endpoint="multicampus_list_campuses")
    @login_required
    def list_campuses():
        page = service.list_campuses(city=str_arg("city"), is_active=bool_arg("isActive"), page=page_from_args())
        return paginated(page, "campuses")

    @app.route("/api/v1/multicampus/campuses/<int:campus_id>", methods=["GET"], endpoint="multicampus_get_campus")
    @login_required
    def get_campus(campus_id: int):
        return success(service.get_campus(campus_id))

    @app.route("/api/v1/multicampus/campuses", methods=["POST"], endpoint="multicampus_create_campus")
    @login_required
    def create_campus():
        body = json_body()
        campus = service.create_campus(
            name=body.get("name"),
            code=body.get("code"),
            address=body.get("address"),
            city=body.get("city"),
            province=body.get("province"),
            phone=body.get("phone"),
            email=body.get("email"),
            established_date=body.get("establishedDate"),
        )
        return success(campus, "Campus created successfully", 201)

    @app.route("/api/v1/multicampus/campuses/<int:campus_id>", methods=["PUT"], endpoint="multicampus_update_campus")
    @login_required
    def update_campus(campus_id: int):
        body = json_body()
        changes = {column: body[key] for key, column in _CAMPUS_FIELDS.items() if key in body}
        return success(service.update_campus(campus_id, changes), "Campus updated successfully")

    @app.route(
        "/api/v1/multicampus/campuses/<int:campus_id>/report", methods=["GET"], endpoint="multicampus_campus_report"
    )
    @login_required
    def campus_report(campus_id: int):
        return success(service.campus_report(campus_id, request.args.get("reportDate")))

    # -------- Student transfers --------
    @app.route(
        "/api/v1/multicampus/student-transfers", methods=["GET"], endpoint="multicampus_list_student_transfers"
    )
    @login_required
    def list_student_transfers():
        page = service.list_student_transfers(filters=_transfer_filters("studentId"), page=page_from_args())
        return paginated(page, "transfers")

    @app.route(
        "/api/v1/multicampus/student-transfers/<int:transfer_id>",
        methods=["GET"],
        endpoint="multicampus_get_student_transfer",
    )
    @login_required
    def get_student_transfer(transfer_id: int):
        return success(service.get_student_transfer(transfer_id))

    @app.route(
        "/api/v1/multicampus/student-transfers", methods=["POST"], endpoint="multicampus_request_student_transfer"
    )
    @login_required
    def request_student_transfer():
        body = json_body()
        transfer = service.request_student_transfer(
            student_id=body.get("studentId"),
            from_campus_id=body.get("fromCampusId"),
            to_campus_id=body.get("toCampusId"),
            reason=body.get("reason"),
        )
        return success(transfer, "Student transfer requested successfully", 201)

    @app.route(
        "/api/v1/multicampus/student-transfers/<int:transfer_id>/approve",
        methods=["POST"],
        endpoint="multicampus_decide_student_transfer",
    )
    @login_required
    def decide_student_transfer(transfer_id: int):
        decision = DecisionInput.from_payload(json_body())
        transfer = service.decide_student_transfer(
            transfer_id=transfer_id, decision=decision, actor_id=current_actor_id()
        )
        return success(transfer, f"Student transfer {decision.status} successfully")

    # -------- Staff transfers --------
    @app.route("/api/v1/multicampus/staff-transfers", methods=["GET"], endpoint="multicampus_list_staff_transfers")
    @login_required
    def list_staff_transfers():
        page = service.list_staff_transfers(filters=_transfer_filters("staffId"), page=page_from_args())
        return paginated(page, "transfers")

    @app.route(
        "/api/v1/multicampus/staff-transfers/<int:transfer_id>",
        methods=["GET"],
        endpoint="multicampus_get_staff_transfer",
    )
    @login_required
    def get_staff_transfer(transfer_id: int):
        return success(service.get_staff_transfer(transfer_id))

    @app.route(
        "/api/v1/multicampus/staff-transfers", methods=["POST"], endpoint="multicampus_request_staff_transfer"
    )
    @login_required
    def request_staff_transfer():
        body = json_body()
        transfer = service.request_staff_transfer(
            employee_id=body.get("staffId"),
            from_campus_id=body.get("fromCampusId"),
            to_campus_id=body.get("toCampusId"),
            reason=body.get("reason"),
        )
        return success(transfer, "Staff transfer requested successfully", 201)

    @app.route(
        "/api/v1/multicampus/staff-transfers/<int:transfer_id>/approve",
        methods=["POST"],
        endpoint="multicampus_decide_staff_transfer",
    )
    @login_required
    def decide_staff_transfer(transfer_id: int):
        decision = DecisionInput.from_payload(json_body())
        transfer = service.decide_staff_transfer(
            transfer_id=transfer_id, decision=decision, actor_id=current_actor_id()
        )
        return success(transfer, f"Staff transfer {decision.status} successfully")
