from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from .model import FeeFilters, FeeSettlement, NewPayment, Payment, PaymentFilters, StudentFee


class FinanceRepository(Protocol):
    def list_student_fees(self, filters: FeeFilters, page: Pagination) -> tuple[Sequence[StudentFee], int]:
        raise NotImplementedError

    def get_student_fee(self, student_fee_id: int) -> Optional[StudentFee]:
        raise NotImplementedError

    def fees_for_student(self, student_id: int, *, semester: Optional[str]) -> Sequence[StudentFee]:
        raise NotImplementedError

    def list_payments(self, filters: PaymentFilters, page: Pagination) -> tuple[Sequence[Payment], int]:
        raise NotImplementedError

    def payments_for_student(self, student_id: int) -> Sequence[Payment]:
        raise NotImplementedError

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def record_payment(self, payment: NewPayment, settlement: FeeSettlement) -> Optional[int]:
        """Insert the payment and apply the fee settlement as one unit of work.

        Returns None (and writes nothing) when the fee changed since it was read.
        """

        raise NotImplementedError
