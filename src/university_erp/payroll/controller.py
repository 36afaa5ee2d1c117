from __future__ import annotations

from flask import Flask, request

from ..common.auth import current_actor_id, login_required
from ..common.http import bool_arg, int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..container import Container
from ..workflow.approval import DecisionInput

_AMOUNT_FIELDS = {
    "basicSalary": "basic_salary",
    "houseRentAllowance": "house_rent_allowance",
    "medicalAllowance": "medical_allowance",
    "transportAllowance": "transport_allowance",
    "otherAllowances": "other_allowances",
    "providentFund": "provident_fund",
    "taxDeduction": "tax_deduction",
    "otherDeductions": "other_deductions",
}
_STRUCTURE_FIELDS = {**_AMOUNT_FIELDS, "effectiveTo": "effective_to", "isActive": "is_active"}


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    # -------- Salary structures --------
    @app.route("/api/v1/payroll/salary-structures", methods=["GET"], endpoint="payroll_list_structures")
    @login_required
    def list_structures():
        page = service.list_structures(
            employee_id=int_arg("employeeId"), is_active=bool_arg("isActive"), page=page_from_args()
        )
        return paginated(page, "structures")

    @app.route(
        "/api/v1/payroll/salary-structures/<int:structure_id>", methods=["GET"], endpoint="payroll_get_structure"
    )
    @login_required
    def get_structure(structure_id: int):
        return success(service.get_structure(structure_id))

    @app.route(
        "/api/v1/payroll/employees/<int:employee_id>/salary-structure",
        methods=["GET"],
        endpoint="payroll_active_structure",
    )
    @login_required
    def active_structure(employee_id: int):
        return success(service.get_active_structure(employee_id))

    @app.route("/api/v1/payroll/salary-structures", methods=["POST"], endpoint="payroll_create_structure")
    @login_required
    def create_structure():
        body = json_body()
        amounts = {column: body.get(key) for key, column in _AMOUNT_FIELDS.items()}
        structure = service.create_structure(
            employee_id=body.get("employeeId"),
            effective_from=body.get("effectiveFrom"),
            effective_to=body.get("effectiveTo"),
            **amounts,
        )
        return success(structure, "Salary structure created successfully", 201)

    @app.route(
        "/api/v1/payroll/salary-structures/<int:structure_id>", methods=["PUT"], endpoint="payroll_update_structure"
    )
    @login_required
    def update_structure(structure_id: int):
        body = json_body()
        changes = {column: body[key] for key, column in _STRUCTURE_FIELDS.items() if key in body}
        return success(service.update_structure(structure_id, changes), "Salary structure updated successfully")

    # -------- Salary processing --------
    @app.route("/api/v1/payroll/processings", methods=["GET"], endpoint="payroll_list_processings")
    @login_required
    def list_processings():
        page = service.list_processings(
            employee_id=int_arg("employeeId"),
            payroll_period=str_arg("payrollPeriod"),
            status=str_arg("status"),
            page=page_from_args(),
        )
        return paginated(page, "processings")

    @app.route("/api/v1/payroll/processings/<int:processing_id>", methods=["GET"], endpoint="payroll_get_processing")
    @login_required
    def get_processing(processing_id: int):
        return success(service.get_processing(processing_id))

    @app.route("/api/v1/payroll/processings", methods=["POST"], endpoint="payroll_process_salary")
    @login_required
    def process_salary():
        body = json_body()
        record = service.process_salary(
            employee_id=body.get("employeeId"),
            payroll_period=body.get("payrollPeriod"),
            days_worked=body.get("daysWorked"),
            bonus=body.get("bonus"),
            advance_deduction=body.get("advanceDeduction"),
            actor_id=current_actor_id(),
        )
        return success(record, "Salary processed successfully", 201)

    @app.route(
        "/api/v1/payroll/processings/<int:processing_id>/process", methods=["POST"], endpoint="payroll_mark_processed"
    )
    @login_required
    def mark_processed(processing_id: int):
        body = json_body()
        record = service.mark_salary_processed(
            processing_id=processing_id, actor_id=current_actor_id(), remarks=body.get("remarks")
        )
        return success(record, "Salary marked as processed")

    @app.route(
        "/api/v1/payroll/processings/<int:processing_id>/approve", methods=["POST"], endpoint="payroll_decide_salary"
    )
    @login_required
    def decide_salary(processing_id: int):
        decision = DecisionInput.from_payload(json_body())
        record = service.decide_salary(processing_id=processing_id, decision=decision, actor_id=current_actor_id())
        return success(record, f"Salary {decision.status} successfully")

    @app.route(
        "/api/v1/payroll/processings/<int:processing_id>/mark-paid", methods=["POST"], endpoint="payroll_mark_paid"
    )
    @login_required
    def mark_paid(processing_id: int):
        body = json_body()
        record = service.mark_salary_paid(processing_id=processing_id, payment_date=body.get("paymentDate"))
        return success(record, "Salary marked as paid")

    # -------- Slips, tax, summary --------
    @app.route(
        "/api/v1/payroll/employees/<int:employee_id>/salary-slips", methods=["GET"], endpoint="payroll_salary_slips"
    )
    @login_required
    def salary_slips(employee_id: int):
        return success(service.list_salary_slips(employee_id=employee_id, limit=request.args.get("limit")))

    @app.route("/api/v1/payroll/employees/<int:employee_id>/tax", methods=["GET"], endpoint="payroll_tax")
    @login_required
    def tax(employee_id: int):
        return success(service.calculate_tax(employee_id=employee_id, tax_year=request.args.get("taxYear")))

    @app.route("/api/v1/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    @login_required
    def summary():
        return success(service.payroll_summary(request.args.get("payrollPeriod")))
