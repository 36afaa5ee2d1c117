from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import FeePaymentStatus, PaymentMethod


@dataclass(frozen=True)
class StudentFee:
    student_fee_id: int
    student_id: int
    semester: str
    amount_due: Decimal
    amount_paid: Decimal
    due_date: date
    payment_status: FeePaymentStatus
    fee_structure_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def balance(self) -> Decimal:
        return self.amount_due - self.amount_paid


@dataclass(frozen=True)
class Payment:
    payment_id: int
    student_fee_id: int
    student_id: int
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    receipt_number: str
    transaction_id: Optional[str] = None
    received_by: Optional[int] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPayment:
    student_fee_id: int
    student_id: int
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    receipt_number: str
    transaction_id: Optional[str] = None
    received_by: Optional[int] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class FeeSettlement:
    """Fee state after a payment; applied only if ``previous_paid`` is still current."""

    student_fee_id: int
    previous_paid: Decimal
    amount_paid: Decimal
    payment_status: FeePaymentStatus


@dataclass(frozen=True)
class PaymentReceipt:
    payment: Payment
    updated_fee: StudentFee


@dataclass(frozen=True)
class FinancialSummary:
    student_id: int
    semester: Optional[str]
    total_fees_due: Decimal
    total_fees_paid: Decimal
    balance: Decimal
    payment_status: FeePaymentStatus
    fees: list[StudentFee] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)


@dataclass(frozen=True)
class FeeFilters:
    student_id: Optional[int] = None
    semester: Optional[str] = None
    payment_status: Optional[FeePaymentStatus] = None


@dataclass(frozen=True)
class PaymentFilters:
    student_id: Optional[int] = None
    student_fee_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
