from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.enums import CertificateRequestStatus, CertificateType, DeliveryMethod


@dataclass(frozen=True)
class CertificateRequest:
    request_id: int
    student_id: int
    certificate_type: CertificateType
    purpose: str
    delivery_method: DeliveryMethod
    status: CertificateRequestStatus
    requested_date: date
    delivery_address: Optional[str] = None
    fee_amount: Decimal = Decimal("0")
    fee_paid: bool = False
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewCertificateRequest:
    student_id: int
    certificate_type: CertificateType
    purpose: str
    delivery_method: DeliveryMethod
    requested_date: date
    delivery_address: Optional[str] = None
    fee_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class Certificate:
    certificate_id: int
    request_id: int
    student_id: int
    certificate_type: CertificateType
    certificate_number: str
    verification_code: str
    issue_date: date
    expiry_date: Optional[date] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    qr_code_url: Optional[str] = None
    pdf_url: Optional[str] = None
    is_verified: bool = False
    verified_at: Optional[datetime] = None
    issued_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewCertificate:
    request_id: int
    student_id: int
    certificate_type: CertificateType
    certificate_number: str
    verification_code: str
    issue_date: date
    expiry_date: Optional[date] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    issued_by: Optional[int] = None


@dataclass(frozen=True)
class VerificationResult:
    is_valid: bool
    message: str
    certificate: Optional[Certificate] = None
    student_name: Optional[str] = None
    certificate_type: Optional[CertificateType] = None
    issue_date: Optional[date] = None
