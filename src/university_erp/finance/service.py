from __future__ import annotations

import logging
import secrets
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import today_local
from ..common.pagination import Page, Pagination
from ..common.validators import optional_date, optional_text, require_enum, require_id, require_positive
from ..core.enums import FeePaymentStatus, PaymentMethod
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import (
    FeeFilters,
    FeeSettlement,
    FinancialSummary,
    NewPayment,
    Payment,
    PaymentFilters,
    PaymentReceipt,
    StudentFee,
)
from .repository import FinanceRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def generate_receipt_number(paid_on: date) -> str:
    return f"RCPT-{paid_on:%Y%m%d}-{secrets.token_hex(4).upper()}"


def settle(fee: StudentFee, amount: Decimal) -> FeeSettlement:
    paid = fee.amount_paid + amount
    status = FeePaymentStatus.PAID if paid >= fee.amount_due else FeePaymentStatus.PARTIAL
    return FeeSettlement(
        student_fee_id=fee.student_fee_id,
        previous_paid=fee.amount_paid,
        amount_paid=paid,
        payment_status=status,
    )


class FinanceService:
    def __init__(self, repo: FinanceRepository):
        self._repo = repo

    def list_student_fees(self, *, filters: FeeFilters, page: Pagination) -> Page[StudentFee]:
        items, total = self._repo.list_student_fees(filters, page)
        return Page(items=items, total=total, pagination=page)

    def get_student_fee(self, student_fee_id: int) -> StudentFee:
        fee = self._repo.get_student_fee(int(student_fee_id))
        if not fee:
            raise NotFoundError("Student fee")
        return fee

    def student_summary(self, student_id: int, *, semester: Optional[str] = None) -> FinancialSummary:
        term = optional_text(semester)
        fees = list(self._repo.fees_for_student(int(student_id), semester=term))
        fee_ids = {f.student_fee_id for f in fees}
        payments = [p for p in self._repo.payments_for_student(int(student_id)) if p.student_fee_id in fee_ids]

        due = sum((f.amount_due for f in fees), ZERO)
        paid = sum((f.amount_paid for f in fees), ZERO)
        balance = due - paid

        if balance <= 0:
            status = FeePaymentStatus.PAID
        elif paid > 0:
            status = FeePaymentStatus.PARTIAL
        else:
            status = FeePaymentStatus.PENDING
        today = today_local()
        if any(
            f.payment_status == FeePaymentStatus.OVERDUE
            or (f.due_date < today and f.payment_status not in (FeePaymentStatus.PAID, FeePaymentStatus.WAIVED))
            for f in fees
        ):
            status = FeePaymentStatus.OVERDUE

        return FinancialSummary(
            student_id=int(student_id),
            semester=term,
            total_fees_due=due,
            total_fees_paid=paid,
            balance=balance,
            payment_status=status,
            fees=fees,
            payments=payments,
        )

    def list_payments(self, *, filters: PaymentFilters, page: Pagination) -> Page[Payment]:
        items, total = self._repo.list_payments(filters, page)
        return Page(items=items, total=total, pagination=page)

    def record_payment(
        self,
        *,
        student_fee_id: Any,
        student_id: Any,
        amount: Any,
        payment_date: Any = None,
        payment_method: Any,
        transaction_id: Optional[str] = None,
        remarks: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> PaymentReceipt:
        """Record a payment against a fee.

        The payment row and the fee's paid amount/status are written in one
        transaction; a concurrent payment on the same fee makes this one fail
        with ConflictError instead of overwriting it.
        """
        fee = self.get_student_fee(require_id(student_fee_id, "Student fee ID"))
        sid = require_id(student_id, "Student ID")
        if fee.student_id != sid:
            raise ValidationError("Student fee does not belong to this student")
        value = require_positive(amount, "Payment amount")
        if value > fee.balance:
            raise ValidationError("Payment amount cannot exceed the remaining balance")

        paid_on = optional_date(payment_date, "Payment date") or today_local()
        payment = NewPayment(
            student_fee_id=fee.student_fee_id,
            student_id=sid,
            amount=value,
            payment_date=paid_on,
            payment_method=require_enum(payment_method, PaymentMethod, "Payment method"),
            receipt_number=generate_receipt_number(paid_on),
            transaction_id=optional_text(transaction_id),
            received_by=actor_id,
            remarks=optional_text(remarks),
        )
        payment_id = self._repo.record_payment(payment, settle(fee, value))
        if payment_id is None:
            raise ConflictError("Student fee was updated by another payment, please retry")

        logger.info("Recorded payment %s (%s) on fee %s", payment_id, payment.receipt_number, fee.student_fee_id)
        recorded = self._repo.get_payment(payment_id)
        if not recorded:
            raise NotFoundError("Payment")
        return PaymentReceipt(payment=recorded, updated_fee=self.get_student_fee(fee.student_fee_id))
