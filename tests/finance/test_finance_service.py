from __future__ import annotations

import re
from datetime import date
from decimal import Decimal

import pytest

from university_erp.common.pagination import Pagination
from university_erp.core.enums import FeePaymentStatus, PaymentMethod
from university_erp.core.exceptions import ConflictError, NotFoundError, ValidationError
from university_erp.finance.model import PaymentFilters
from university_erp.finance.service import FinanceService, generate_receipt_number


def _pay(svc, fee, amount, **overrides):
    values = dict(
        student_fee_id=fee.student_fee_id,
        student_id=fee.student_id,
        amount=amount,
        payment_date="2026-03-02",
        payment_method="bank_transfer",
        actor_id=5,
    )
    values.update(overrides)
    return svc.record_payment(**values)


def test_receipt_number_format():
    assert re.match(r"^RCPT-20260302-[0-9A-F]{8}$", generate_receipt_number(date(2026, 3, 2)))


def test_partial_then_full_payment(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(due="50000")

    first = _pay(svc, fee, "20000", transaction_id=" TX-1 ")
    assert first.updated_fee.payment_status is FeePaymentStatus.PARTIAL
    assert first.updated_fee.amount_paid == Decimal("20000")
    assert first.payment.transaction_id == "TX-1"
    assert first.payment.payment_method is PaymentMethod.BANK_TRANSFER
    assert first.payment.receipt_number.startswith("RCPT-20260302-")

    second = _pay(svc, fee, "30000")
    assert second.updated_fee.payment_status is FeePaymentStatus.PAID
    assert second.updated_fee.balance == Decimal("0")
    assert len(finance_repo.payments) == 2


@pytest.mark.parametrize("amount", ["0", "-10", "abc"])
def test_payment_amount_must_be_positive(finance_repo, amount):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee()

    with pytest.raises(ValidationError):
        _pay(svc, fee, amount)


def test_payment_cannot_exceed_balance(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(due="50000", paid="45000", status=FeePaymentStatus.PARTIAL)

    with pytest.raises(ValidationError, match="remaining balance"):
        _pay(svc, fee, "5000.01")
    assert finance_repo.payments == {}


def test_payment_for_other_students_fee(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(student_id=1)

    with pytest.raises(ValidationError, match="does not belong"):
        _pay(svc, fee, "100", student_id=2)
    with pytest.raises(NotFoundError):
        _pay(svc, fee, "100", student_fee_id=999)


def test_concurrent_payment_is_not_overwritten(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(due="50000")
    finance_repo.concurrent_payment = Decimal("10000")

    with pytest.raises(ConflictError):
        _pay(svc, fee, "20000")

    assert finance_repo.fees[fee.student_fee_id].amount_paid == Decimal("10000")
    assert finance_repo.payments == {}


def test_summary_totals_and_status(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(student_id=3, semester="Fall-2026", due="50000")
    finance_repo.add_fee(student_id=3, semester="Spring-2026", due="40000", paid="40000", status=FeePaymentStatus.PAID)
    _pay(svc, fee, "10000")

    overall = svc.student_summary(3)
    assert overall.total_fees_due == Decimal("90000")
    assert overall.total_fees_paid == Decimal("50000")
    assert overall.balance == Decimal("40000")
    assert overall.payment_status is FeePaymentStatus.PARTIAL
    assert len(overall.payments) == 1

    spring = svc.student_summary(3, semester="Spring-2026")
    assert spring.payment_status is FeePaymentStatus.PAID
    assert spring.payments == []


def test_summary_overdue_when_unpaid_fee_is_past_due(finance_repo):
    svc = FinanceService(finance_repo)
    finance_repo.add_fee(student_id=4, due="30000", due_date=date(2020, 1, 1))
    finance_repo.add_fee(
        student_id=4, semester="Old", due="1000", due_date=date(2019, 1, 1), status=FeePaymentStatus.WAIVED
    )

    assert svc.student_summary(4).payment_status is FeePaymentStatus.OVERDUE


def test_summary_without_fees(finance_repo):
    summary = FinanceService(finance_repo).student_summary(77)

    assert summary.total_fees_due == Decimal("0")
    assert summary.payment_status is FeePaymentStatus.PAID


def test_list_payments_by_method(finance_repo):
    svc = FinanceService(finance_repo)
    fee = finance_repo.add_fee(due="50000")
    _pay(svc, fee, "1000", payment_method="cash")
    _pay(svc, fee, "1000", payment_method="card")

    page = svc.list_payments(filters=PaymentFilters(payment_method=PaymentMethod.CASH), page=Pagination(page=1, limit=5))

    assert page.total == 1
    assert page.items[0].payment_method is PaymentMethod.CASH
