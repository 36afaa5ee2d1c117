from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from university_erp.certification.codes import (
    CERTIFICATE_NUMBER_PATTERN,
    VERIFICATION_CODE_PATTERN,
    fee_paid_guard,
    generate_certificate_number,
    generate_verification_code,
)
from university_erp.certification.model import CertificateRequest
from university_erp.core.enums import CertificateRequestStatus, CertificateType, DeliveryMethod
from university_erp.core.exceptions import ValidationError


@pytest.mark.parametrize("issued", [date(2026, 1, 1), date(2026, 12, 31), date(1999, 7, 4)])
def test_certificate_number_format(issued):
    number = generate_certificate_number(issued)

    assert CERTIFICATE_NUMBER_PATTERN.match(number)
    assert number.startswith(f"CERT-{issued.year}-{issued:%m%d}-")


def test_verification_code_format_and_spread():
    codes = {generate_verification_code() for _ in range(10000)}

    assert len(codes) == 10000
    assert all(VERIFICATION_CODE_PATTERN.match(c) for c in codes)


def _request(fee: str, paid: bool) -> CertificateRequest:
    return CertificateRequest(
        request_id=1,
        student_id=1,
        certificate_type=CertificateType.TRANSCRIPT,
        purpose="Visa",
        delivery_method=DeliveryMethod.PICKUP,
        status=CertificateRequestStatus.PENDING,
        requested_date=date(2026, 1, 1),
        fee_amount=Decimal(fee),
        fee_paid=paid,
    )


def test_fee_guard_blocks_unpaid_approval_only():
    with pytest.raises(ValidationError, match="Fee must be paid"):
        fee_paid_guard(_request("500", False), "approved")

    fee_paid_guard(_request("500", False), "rejected")
    fee_paid_guard(_request("500", True), "approved")
    fee_paid_guard(_request("0", False), "approved")
