from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from ..core.enums import CertificateRequestStatus, CertificateType
from .model import Certificate, CertificateRequest, NewCertificate, NewCertificateRequest


class CertificationRepository(Protocol):
    # Requests
    def list_requests(
        self,
        *,
        student_id: Optional[int],
        status: Optional[CertificateRequestStatus],
        certificate_type: Optional[CertificateType],
        page: Pagination,
    ) -> tuple[Sequence[CertificateRequest], int]:
        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[CertificateRequest]:
        raise NotImplementedError

    def create_request(self, data: NewCertificateRequest) -> int:
        raise NotImplementedError

    def save_request_status(self, updated: CertificateRequest, *, expected: CertificateRequestStatus) -> bool:
        raise NotImplementedError

    def mark_fee_paid(self, request_id: int) -> bool:
        """Set ``fee_paid`` only if it is not set yet."""

        raise NotImplementedError

    # Certificates
    def list_certificates(
        self,
        *,
        student_id: Optional[int],
        certificate_type: Optional[CertificateType],
        is_verified: Optional[bool],
        page: Pagination,
    ) -> tuple[Sequence[Certificate], int]:
        raise NotImplementedError

    def get_certificate(self, certificate_id: int) -> Optional[Certificate]:
        raise NotImplementedError

    def find_by_verification_code(self, verification_code: str) -> Optional[Certificate]:
        raise NotImplementedError

    def find_by_number(self, certificate_number: str) -> Optional[Certificate]:
        raise NotImplementedError

    def issue_certificate(self, data: NewCertificate, processing: CertificateRequest) -> Optional[int]:
        """Insert the certificate and move its request approved -> processing in one unit.

        Returns None when the request is no longer approved. A duplicate number
        or verification code raises ConflictError and nothing is written.
        """

        raise NotImplementedError

    def mark_verified(self, certificate_id: int, *, verified_at: datetime) -> bool:
        raise NotImplementedError

    def update_urls(self, certificate_id: int, *, qr_code_url: Optional[str], pdf_url: Optional[str]) -> bool:
        raise NotImplementedError
