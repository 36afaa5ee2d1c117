from __future__ import annotations

from flask import Flask

from ..common.auth import current_actor_id, login_required
from ..common.http import int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import FeePaymentStatus, PaymentMethod
from .model import FeeFilters, PaymentFilters


def register(app: Flask, container: Container) -> None:
    service = container.finance_service

    @app.route("/api/v1/finance/student-fees", methods=["GET"], endpoint="finance_list_student_fees")
    @login_required
    def list_student_fees():
        status = str_arg("paymentStatus")
        filters = FeeFilters(
            student_id=int_arg("studentId"),
            semester=str_arg("semester"),
            payment_status=require_enum(status, FeePaymentStatus, "Payment status") if status else None,
        )
        return paginated(service.list_student_fees(filters=filters, page=page_from_args()), "studentFees")

    @app.route("/api/v1/finance/student-fees/<int:student_fee_id>", methods=["GET"], endpoint="finance_get_student_fee")
    @login_required
    def get_student_fee(student_fee_id: int):
        return success(service.get_student_fee(student_fee_id))

    @app.route("/api/v1/finance/students/<int:student_id>/summary", methods=["GET"], endpoint="finance_student_summary")
    @login_required
    def student_summary(student_id: int):
        return success(service.student_summary(student_id, semester=str_arg("semester")))

    @app.route("/api/v1/finance/payments", methods=["GET"], endpoint="finance_list_payments")
    @login_required
    def list_payments():
        method = str_arg("paymentMethod")
        filters = PaymentFilters(
            student_id=int_arg("studentId"),
            student_fee_id=int_arg("studentFeeId"),
            payment_method=require_enum(method, PaymentMethod, "Payment method") if method else None,
        )
        return paginated(service.list_payments(filters=filters, page=page_from_args()), "payments")

    @app.route("/api/v1/finance/payments", methods=["POST"], endpoint="finance_record_payment")
    @login_required
    def record_payment():
        body = json_body()
        receipt = service.record_payment(
            student_fee_id=body.get("studentFeeId"),
            student_id=body.get("studentId"),
            amount=body.get("amount"),
            payment_date=body.get("paymentDate"),
            payment_method=body.get("paymentMethod"),
            transaction_id=body.get("transactionId"),
            remarks=body.get("remarks"),
            actor_id=current_actor_id(),
        )
        return success(receipt, "Payment recorded successfully", 201)
