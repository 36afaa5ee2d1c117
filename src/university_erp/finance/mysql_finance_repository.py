from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.pagination import Pagination
from ..core.enums import FeePaymentStatus, PaymentMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import FeeFilters, FeeSettlement, NewPayment, Payment, PaymentFilters, StudentFee
from .repository import FinanceRepository

_FEE_COLUMNS = """
    student_fee_id, student_id, fee_structure_id, semester, amount_due, amount_paid,
    due_date, payment_status, created_at
"""

_PAYMENT_COLUMNS = """
    payment_id, student_fee_id, student_id, amount, payment_date, payment_method,
    transaction_id, receipt_number, received_by, remarks, created_at
"""


def _to_fee(row: dict) -> StudentFee:
    return StudentFee(
        student_fee_id=int(row["student_fee_id"]),
        student_id=int(row["student_id"]),
        fee_structure_id=row.get("fee_structure_id"),
        semester=row["semester"],
        amount_due=Decimal(row["amount_due"]),
        amount_paid=Decimal(row.get("amount_paid") or 0),
        due_date=row["due_date"],
        payment_status=FeePaymentStatus(row["payment_status"]),
        created_at=row.get("created_at"),
    )


def _to_payment(row: dict) -> Payment:
    return Payment(
        payment_id=int(row["payment_id"]),
        student_fee_id=int(row["student_fee_id"]),
        student_id=int(row["student_id"]),
        amount=Decimal(row["amount"]),
        payment_date=row["payment_date"],
        payment_method=PaymentMethod(row["payment_method"]),
        receipt_number=row["receipt_number"],
        transaction_id=row.get("transaction_id"),
        received_by=row.get("received_by"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
    )


class MySQLFinanceRepository(FinanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_student_fees(self, filters: FeeFilters, page: Pagination) -> tuple[Sequence[StudentFee], int]:
        where, params = where_clause(
            [
                ("student_id", filters.student_id),
                ("semester", filters.semester),
                ("payment_status", filters.payment_status),
            ]
        )
        with db_transaction(self._conn_factory, "fetch student fees") as cur:
            total = count(cur, "student_fees", where, params)
            cur.execute(
                f"""
                SELECT {_FEE_COLUMNS}
                FROM student_fees
                WHERE {where}
                ORDER BY due_date DESC, student_fee_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_fee(r) for r in fetchall(cur)], total

    def get_student_fee(self, student_fee_id: int) -> Optional[StudentFee]:
        with db_transaction(self._conn_factory, "fetch student fee") as cur:
            cur.execute(f"SELECT {_FEE_COLUMNS} FROM student_fees WHERE student_fee_id=%s", (int(student_fee_id),))
            row = fetchone(cur)
            return _to_fee(row) if row else None

    def fees_for_student(self, student_id: int, *, semester: Optional[str]) -> Sequence[StudentFee]:
        where, params = where_clause([("student_id", int(student_id)), ("semester", semester)])
        with db_transaction(self._conn_factory, "fetch student fees") as cur:
            cur.execute(f"SELECT {_FEE_COLUMNS} FROM student_fees WHERE {where} ORDER BY due_date", tuple(params))
            return [_to_fee(r) for r in fetchall(cur)]

    def list_payments(self, filters: PaymentFilters, page: Pagination) -> tuple[Sequence[Payment], int]:
        where, params = where_clause(
            [
                ("student_id", filters.student_id),
                ("student_fee_id", filters.student_fee_id),
                ("payment_method", filters.payment_method),
            ]
        )
        with db_transaction(self._conn_factory, "fetch payments") as cur:
            total = count(cur, "payments", where, params)
            cur.execute(
                f"""
                SELECT {_PAYMENT_COLUMNS}
                FROM payments
                WHERE {where}
                ORDER BY payment_date DESC, payment_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_payment(r) for r in fetchall(cur)], total

    def payments_for_student(self, student_id: int) -> Sequence[Payment]:
        with db_transaction(self._conn_factory, "fetch payments") as cur:
            cur.execute(
                f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE student_id=%s ORDER BY payment_date",
                (int(student_id),),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        with db_transaction(self._conn_factory, "fetch payment") as cur:
            cur.execute(f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE payment_id=%s", (int(payment_id),))
            row = fetchone(cur)
            return _to_payment(row) if row else None

    def record_payment(self, payment: NewPayment, settlement: FeeSettlement) -> Optional[int]:
        with db_transaction(self._conn_factory, "record payment") as cur:
            cur.execute(
                """
                UPDATE student_fees
                SET amount_paid=%s, payment_status=%s
                WHERE student_fee_id=%s AND amount_paid=%s
                """,
                (
                    settlement.amount_paid,
                    settlement.payment_status.value,
                    settlement.student_fee_id,
                    settlement.previous_paid,
                ),
            )
            if cur.rowcount != 1:
                return None
            cur.execute(
                """
                INSERT INTO payments(
                    student_fee_id, student_id, amount, payment_date, payment_method,
                    transaction_id, receipt_number, received_by, remarks
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment.student_fee_id,
                    payment.student_id,
                    payment.amount,
                    payment.payment_date,
                    payment.payment_method.value,
                    payment.transaction_id,
                    payment.receipt_number,
                    payment.received_by,
                    payment.remarks,
                ),
            )
            return int(cur.lastrowid)
