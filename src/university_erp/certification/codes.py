"""Certificate identifiers and the fee precondition for approval."""

from __future__ import annotations

import re
import secrets
from datetime import date

from ..core.enums import CertificateRequestStatus
from ..core.exceptions import ValidationError
from ..workflow.approval import status_value

VERIFICATION_CODE_PATTERN = re.compile(r"^VER-[0-9A-F]{16}$")
CERTIFICATE_NUMBER_PATTERN = re.compile(r"^CERT-\d{4}-\d{4}-\d{5}$")


def generate_verification_code() -> str:
    """``VER-`` followed by 8 random bytes as upper-case hex."""
    return f"VER-{secrets.token_hex(8).upper()}"


def generate_certificate_number(issue_date: date) -> str:
    """``CERT-YYYY-MMDD-NNNNN``; the suffix is random, uniqueness is enforced on insert."""
    return f"CERT-{issue_date:%Y}-{issue_date:%m%d}-{secrets.randbelow(100000):05d}"


def fee_paid_guard(request, to) -> None:
    """Approval needs the fee settled when there is one; rejection does not."""
    if status_value(to) != CertificateRequestStatus.APPROVED.value:
        return
    if request.fee_amount and request.fee_amount > 0 and not request.fee_paid:
        raise ValidationError("Fee must be paid before approval")
