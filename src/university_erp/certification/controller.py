from __future__ import annotations

from flask import Flask, request

from ..common.auth import current_actor_id, login_required
from ..common.http import bool_arg, int_arg, json_body, page_from_args, str_arg
from ..common.responses import paginated, success
from ..container import Container
from ..workflow.approval import DecisionInput


def register(app: Flask, container: Container) -> None:
    service = container.certification_service

    # -------- Public verification --------
    @app.route("/api/v1/certification/verify", methods=["POST", "GET"], endpoint="certification_verify")
    def verify():
        source = json_body() if request.method == "POST" else request.args
        result = service.verify(
            verification_code=source.get("verificationCode"),
            certificate_number=source.get("certificateNumber"),
        )
        return success(result, result.message)

    # -------- Requests --------
    @app.route("/api/v1/certification/requests", methods=["GET"], endpoint="certification_list_requests")
    @login_required
    def list_requests():
        page = service.list_requests(
            student_id=int_arg("studentId"),
            status=str_arg("status"),
            certificate_type=str_arg("certificateType"),
            page=page_from_args(),
        )
        return paginated(page, "requests")

    @app.route("/api/v1/certification/requests/<int:request_id>", methods=["GET"], endpoint="certification_get_request")
    @login_required
    def get_request(request_id: int):
        return success(service.get_request(request_id))

    @app.route("/api/v1/certification/requests", methods=["POST"], endpoint="certification_create_request")
    @login_required
    def create_request():
        body = json_body()
        req = service.create_request(
            student_id=body.get("studentId"),
            certificate_type=body.get("certificateType"),
            purpose=body.get("purpose"),
            delivery_method=body.get("deliveryMethod"),
            delivery_address=body.get("deliveryAddress"),
            fee_amount=body.get("feeAmount"),
        )
        return success(req, "Certificate request created successfully", 201)

    @app.route(
        "/api/v1/certification/requests/<int:request_id>/approve",
        methods=["POST"],
        endpoint="certification_decide_request",
    )
    @login_required
    def decide_request(request_id: int):
        decision = DecisionInput.from_payload(json_body())
        req = service.decide_request(request_id=request_id, decision=decision, actor_id=current_actor_id())
        return success(req, f"Certificate request {decision.status} successfully")

    @app.route(
        "/api/v1/certification/requests/<int:request_id>/mark-fee-paid",
        methods=["POST"],
        endpoint="certification_mark_fee_paid",
    )
    @login_required
    def mark_fee_paid(request_id: int):
        return success(service.mark_fee_paid(request_id), "Fee marked as paid")

    # -------- Certificates --------
    @app.route("/api/v1/certification/certificates", methods=["GET"], endpoint="certification_list_certificates")
    @login_required
    def list_certificates():
        page = service.list_certificates(
            student_id=int_arg("studentId"),
            certificate_type=str_arg("certificateType"),
            is_verified=bool_arg("isVerified"),
            page=page_from_args(),
        )
        return paginated(page, "certificates")

    @app.route(
        "/api/v1/certification/certificates/<int:certificate_id>",
        methods=["GET"],
        endpoint="certification_get_certificate",
    )
    @login_required
    def get_certificate(certificate_id: int):
        return success(service.get_certificate(certificate_id))

    @app.route("/api/v1/certification/certificates/process", methods=["POST"], endpoint="certification_issue")
    @login_required
    def issue_certificate():
        body = json_body()
        cert = service.issue_certificate(
            request_id=body.get("certificateRequestId"),
            issue_date=body.get("issueDate"),
            expiry_date=body.get("expiryDate"),
            metadata=body.get("metadata"),
            actor_id=current_actor_id(),
        )
        return success(cert, "Certificate processed successfully", 201)

    @app.route(
        "/api/v1/certification/certificates/<int:certificate_id>/mark-ready",
        methods=["POST"],
        endpoint="certification_mark_ready",
    )
    @login_required
    def mark_ready(certificate_id: int):
        return success(service.mark_certificate_ready(certificate_id), "Certificate marked as ready")

    @app.route(
        "/api/v1/certification/certificates/<int:certificate_id>/urls",
        methods=["PUT"],
        endpoint="certification_update_urls",
    )
    @login_required
    def update_urls(certificate_id: int):
        body = json_body()
        cert = service.update_certificate_urls(
            certificate_id, qr_code_url=body.get("qrCodeUrl"), pdf_url=body.get("pdfUrl")
        )
        return success(cert, "Certificate URLs updated")
