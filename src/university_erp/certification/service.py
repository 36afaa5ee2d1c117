from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local, today_local
from ..common.pagination import Page, Pagination
from ..common.validators import (
    optional_date,
    optional_text,
    require_date,
    require_enum,
    require_id,
    require_non_empty,
    require_non_negative,
)
from ..core.constants import CERTIFICATE_CODE_ATTEMPTS
from ..core.enums import CertificateRequestStatus, CertificateType, DeliveryMethod
from ..core.exceptions import ConflictError, NotFoundError, RepositoryError, ValidationError
from ..workflow.approval import DecisionInput, advance, decide
from .codes import fee_paid_guard, generate_certificate_number, generate_verification_code
from .model import Certificate, CertificateRequest, NewCertificate, NewCertificateRequest, VerificationResult
from .repository import CertificationRepository

logger = logging.getLogger(__name__)


class CertificationService:
    def __init__(
        self,
        repo: CertificationRepository,
        *,
        verification_codes: Callable[[], str] = generate_verification_code,
        certificate_numbers: Callable[..., str] = generate_certificate_number,
        max_attempts: int = CERTIFICATE_CODE_ATTEMPTS,
    ):
        self._repo = repo
        self._verification_codes = verification_codes
        self._certificate_numbers = certificate_numbers
        self._max_attempts = max_attempts

    # -------- Requests --------
    def list_requests(
        self,
        *,
        student_id: Optional[int] = None,
        status: Any = None,
        certificate_type: Any = None,
        page: Pagination,
    ) -> Page[CertificateRequest]:
        items, total = self._repo.list_requests(
            student_id=student_id,
            status=require_enum(status, CertificateRequestStatus, "Status") if status else None,
            certificate_type=require_enum(certificate_type, CertificateType, "Certificate type") if certificate_type else None,
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def get_request(self, request_id: int) -> CertificateRequest:
        req = self._repo.get_request(int(request_id))
        if not req:
            raise NotFoundError("Certificate request")
        return req

    def create_request(
        self,
        *,
        student_id: Any,
        certificate_type: Any,
        purpose: Optional[str],
        delivery_method: Any,
        delivery_address: Optional[str] = None,
        fee_amount: Any = None,
    ) -> CertificateRequest:
        method = require_enum(delivery_method, DeliveryMethod, "Delivery method")
        address = optional_text(delivery_address)
        if method == DeliveryMethod.POSTAL and not address:
            raise ValidationError("Delivery address is required for postal delivery")

        request_id = self._repo.create_request(
            NewCertificateRequest(
                student_id=require_id(student_id, "Student ID"),
                certificate_type=require_enum(certificate_type, CertificateType, "Certificate type"),
                purpose=require_non_empty(purpose, "Purpose"),
                delivery_method=method,
                delivery_address=address,
                fee_amount=require_non_negative(fee_amount, "Fee amount"),
                requested_date=today_local(),
            )
        )
        logger.info("Certificate request %s created", request_id)
        return self.get_request(request_id)

    def decide_request(self, *, request_id: int, decision: DecisionInput, actor_id: int) -> CertificateRequest:
        current = self.get_request(request_id)
        decided = decide(
            current,
            to=decision.status,
            actor_id=actor_id,
            subject="requests",
            guards=(fee_paid_guard,),
            remarks=decision.remarks,
            rejection_reason=decision.rejection_reason,
        )
        if not self._repo.save_request_status(decided, expected=current.status):
            raise ConflictError("Certificate request was already processed by another user")
        return decided

    def mark_fee_paid(self, request_id: int) -> CertificateRequest:
        current = self.get_request(request_id)
        if current.fee_paid or not self._repo.mark_fee_paid(current.request_id):
            raise ValidationError("Fee is already marked as paid")
        return self.get_request(request_id)

    # -------- Certificates --------
    def list_certificates(
        self,
        *,
        student_id: Optional[int] = None,
        certificate_type: Any = None,
        is_verified: Optional[bool] = None,
        page: Pagination,
    ) -> Page[Certificate]:
        items, total = self._repo.list_certificates(
            student_id=student_id,
            certificate_type=require_enum(certificate_type, CertificateType, "Certificate type") if certificate_type else None,
            is_verified=is_verified,
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def get_certificate(self, certificate_id: int) -> Certificate:
        cert = self._repo.get_certificate(int(certificate_id))
        if not cert:
            raise NotFoundError("Certificate")
        return cert

    def issue_certificate(
        self,
        *,
        request_id: Any,
        issue_date: Any,
        expiry_date: Any = None,
        metadata: Optional[dict] = None,
        actor_id: Optional[int] = None,
    ) -> Certificate:
        """Generate the certificate for an approved request.

        Codes are random; a clash with an existing certificate is retried with
        fresh codes up to ``max_attempts`` times.
        """
        current = self.get_request(require_id(request_id, "Certificate request ID"))
        issued_on = require_date(issue_date, "Issue date")
        expires_on = optional_date(expiry_date, "Expiry date")
        if expires_on and expires_on <= issued_on:
            raise ValidationError("Expiry date must be after issue date")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("Metadata must be an object")

        processing = advance(
            current,
            to=CertificateRequestStatus.PROCESSING,
            allowed_from=(CertificateRequestStatus.APPROVED,),
            subject="requests",
            processed_by=actor_id,
        )

        for attempt in range(1, self._max_attempts + 1):
            data = NewCertificate(
                request_id=current.request_id,
                student_id=current.student_id,
                certificate_type=current.certificate_type,
                certificate_number=self._certificate_numbers(issued_on),
                verification_code=self._verification_codes(),
                issue_date=issued_on,
                expiry_date=expires_on,
                metadata=dict(metadata or {}),
                issued_by=actor_id,
            )
            try:
                certificate_id = self._repo.issue_certificate(data, processing)
            except ConflictError:
                logger.warning(
                    "Certificate code collision for request %s (attempt %d/%d)",
                    current.request_id,
                    attempt,
                    self._max_attempts,
                )
                continue
            if certificate_id is None:
                raise ConflictError("Certificate request was already processed by another user")
            logger.info("Issued certificate %s (%s)", certificate_id, data.certificate_number)
            return self.get_certificate(certificate_id)

        raise ConflictError("Could not generate a unique certificate number, please retry")

    def mark_certificate_ready(self, certificate_id: int) -> Certificate:
        cert = self.get_certificate(certificate_id)
        current = self.get_request(cert.request_id)
        ready = advance(
            current,
            to=CertificateRequestStatus.READY,
            allowed_from=(CertificateRequestStatus.PROCESSING,),
            subject="requests",
        )
        if not self._repo.save_request_status(ready, expected=CertificateRequestStatus.PROCESSING):
            raise ConflictError("Certificate request was already processed by another user")
        return cert

    def update_certificate_urls(
        self, certificate_id: int, *, qr_code_url: Optional[str] = None, pdf_url: Optional[str] = None
    ) -> Certificate:
        self.get_certificate(certificate_id)
        qr, pdf = optional_text(qr_code_url), optional_text(pdf_url)
        if not qr and not pdf:
            raise ValidationError("QR code URL or PDF URL is required")
        self._repo.update_urls(int(certificate_id), qr_code_url=qr, pdf_url=pdf)
        return self.get_certificate(certificate_id)

    # -------- Public verification --------
    def verify(
        self, *, verification_code: Optional[str] = None, certificate_number: Optional[str] = None
    ) -> VerificationResult:
        code = optional_text(verification_code)
        number = optional_text(certificate_number)
        if not code and not number:
            return VerificationResult(
                is_valid=False, message="Verification code or certificate number is required"
            )

        try:
            if code:
                cert = self._repo.find_by_verification_code(code.upper())
            else:
                cert = self._repo.find_by_number(number.upper())
            if cert and not cert.is_verified:
                stamp = now_local()
                self._repo.mark_verified(cert.certificate_id, verified_at=stamp)
                cert = dataclasses.replace(cert, is_verified=True, verified_at=stamp)
        except RepositoryError:
            logger.exception("Certificate verification lookup failed")
            return VerificationResult(
                is_valid=False, message="Error verifying certificate. Please try again later."
            )

        if not cert:
            return VerificationResult(
                is_valid=False,
                message="Certificate not found. Please verify the verification code or certificate number.",
            )
        return VerificationResult(
            is_valid=True,
            message="Certificate is valid and authentic.",
            certificate=cert,
            student_name=cert.metadata.get("studentName") or "Unknown",
            certificate_type=cert.certificate_type,
            issue_date=cert.issue_date,
        )
