from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.pagination import Pagination
from ..core.enums import SalaryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import STRUCTURE_AMOUNT_FIELDS, NewSalarySlip, SalaryProcessing, SalarySlip, SalaryStructure
from .repository import PayrollRepository

_STRUCTURE_COLUMNS = """
    structure_id, employee_id, basic_salary, house_rent_allowance, medical_allowance,
    transport_allowance, other_allowances, provident_fund, tax_deduction, other_deductions,
    gross_salary, net_salary, effective_from, effective_to, is_active, created_at
"""

_PROCESSING_COLUMNS = """
    processing_id, employee_id, payroll_period, basic_salary, allowances, bonus, gross_salary,
    provident_fund, tax_amount, advance_deduction, other_deductions, deductions, net_salary,
    days_worked, days_in_month, status, processed_by, processed_at, approved_by, approved_at,
    rejection_reason, remarks, payment_date, created_at
"""

_SLIP_COLUMNS = """
    slip_id, processing_id, employee_id, payroll_period, slip_number,
    gross_salary, total_deductions, net_salary, issued_at
"""


def _money(value) -> Decimal:
    return Decimal(value if value is not None else 0)


def _to_structure(row: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=int(row["structure_id"]),
        employee_id=int(row["employee_id"]),
        effective_from=row["effective_from"],
        effective_to=row.get("effective_to"),
        gross_salary=_money(row.get("gross_salary")),
        net_salary=_money(row.get("net_salary")),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        **{name: _money(row.get(name)) for name in STRUCTURE_AMOUNT_FIELDS},
    )


def _to_processing(row: dict) -> SalaryProcessing:
    return SalaryProcessing(
        processing_id=int(row["processing_id"]),
        employee_id=int(row["employee_id"]),
        payroll_period=row["payroll_period"],
        basic_salary=_money(row["basic_salary"]),
        allowances=_money(row["allowances"]),
        bonus=_money(row.get("bonus")),
        gross_salary=_money(row["gross_salary"]),
        provident_fund=_money(row.get("provident_fund")),
        tax_amount=_money(row.get("tax_amount")),
        advance_deduction=_money(row.get("advance_deduction")),
        other_deductions=_money(row.get("other_deductions")),
        deductions=_money(row["deductions"]),
        net_salary=_money(row["net_salary"]),
        days_worked=int(row["days_worked"]),
        days_in_month=int(row["days_in_month"]),
        status=SalaryStatus(row["status"]),
        processed_by=row.get("processed_by"),
        processed_at=row.get("processed_at"),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        remarks=row.get("remarks"),
        payment_date=row.get("payment_date"),
        created_at=row.get("created_at"),
    )


def _to_slip(row: dict) -> SalarySlip:
    return SalarySlip(
        slip_id=int(row["slip_id"]),
        processing_id=int(row["processing_id"]),
        employee_id=int(row["employee_id"]),
        payroll_period=row["payroll_period"],
        slip_number=row["slip_number"],
        gross_salary=_money(row["gross_salary"]),
        total_deductions=_money(row["total_deductions"]),
        net_salary=_money(row["net_salary"]),
        issued_at=row.get("issued_at"),
    )


_UPDATE_STATUS_SQL = """
    UPDATE salary_processing
    SET status=%s, processed_by=%s, processed_at=%s, approved_by=%s, approved_at=%s,
        rejection_reason=%s, remarks=%s, payment_date=%s
    WHERE processing_id=%s AND status=%s
"""


def _status_params(record: SalaryProcessing, expected: SalaryStatus) -> tuple:
    return (
        record.status.value,
        record.processed_by,
        record.processed_at,
        record.approved_by,
        record.approved_at,
        record.rejection_reason,
        record.remarks,
        record.payment_date,
        record.processing_id,
        expected.value,
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Salary structures --------
    def list_structures(
        self, *, employee_id: Optional[int], is_active: Optional[bool], page: Pagination
    ) -> tuple[Sequence[SalaryStructure], int]:
        where, params = where_clause(
            [("employee_id", employee_id), ("is_active", None if is_active is None else int(is_active))]
        )
        with db_transaction(self._conn_factory, "fetch salary structures") as cur:
            total = count(cur, "salary_structures", where, params)
            cur.execute(
                f"""
                SELECT {_STRUCTURE_COLUMNS}
                FROM salary_structures
                WHERE {where}
                ORDER BY effective_from DESC, structure_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_structure(r) for r in fetchall(cur)], total

    def get_structure(self, structure_id: int) -> Optional[SalaryStructure]:
        with db_transaction(self._conn_factory, "fetch salary structure") as cur:
            cur.execute(
                f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures WHERE structure_id=%s", (int(structure_id),)
            )
            row = fetchone(cur)
            return _to_structure(row) if row else None

    def get_active_structure(self, employee_id: int) -> Optional[SalaryStructure]:
        with db_transaction(self._conn_factory, "fetch active salary structure") as cur:
            cur.execute(
                f"""
                SELECT {_STRUCTURE_COLUMNS}
                FROM salary_structures
                WHERE employee_id=%s AND is_active=1
                ORDER BY effective_from DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            return _to_structure(row) if row else None

    def create_structure(self, structure: SalaryStructure) -> int:
        with db_transaction(self._conn_factory, "create salary structure") as cur:
            cur.execute(
                "UPDATE salary_structures SET is_active=0, effective_to=%s WHERE employee_id=%s AND is_active=1",
                (structure.effective_from, structure.employee_id),
            )
            cur.execute(
                """
                INSERT INTO salary_structures(
                    employee_id, basic_salary, house_rent_allowance, medical_allowance, transport_allowance,
                    other_allowances, provident_fund, tax_deduction, other_deductions,
                    gross_salary, net_salary, effective_from, effective_to, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    structure.employee_id,
                    *(getattr(structure, name) for name in STRUCTURE_AMOUNT_FIELDS),
                    structure.gross_salary,
                    structure.net_salary,
                    structure.effective_from,
                    structure.effective_to,
                ),
            )
            return int(cur.lastrowid)

    def update_structure(self, structure: SalaryStructure) -> bool:
        assignments = ", ".join(f"{name}=%s" for name in STRUCTURE_AMOUNT_FIELDS)
        with db_transaction(self._conn_factory, "update salary structure") as cur:
            cur.execute(
                f"""
                UPDATE salary_structures
                SET {assignments}, gross_salary=%s, net_salary=%s, effective_to=%s, is_active=%s
                WHERE structure_id=%s
                """,
                (
                    *(getattr(structure, name) for name in STRUCTURE_AMOUNT_FIELDS),
                    structure.gross_salary,
                    structure.net_salary,
                    structure.effective_to,
                    int(structure.is_active),
                    structure.structure_id,
                ),
            )
            return cur.rowcount > 0

    # -------- Salary processing --------
    def list_processings(
        self,
        *,
        employee_id: Optional[int],
        payroll_period: Optional[str],
        status: Optional[SalaryStatus],
        page: Pagination,
    ) -> tuple[Sequence[SalaryProcessing], int]:
        where, params = where_clause(
            [("employee_id", employee_id), ("payroll_period", payroll_period), ("status", status)]
        )
        with db_transaction(self._conn_factory, "fetch salary processings") as cur:
            total = count(cur, "salary_processing", where, params)
            cur.execute(
                f"""
                SELECT {_PROCESSING_COLUMNS}
                FROM salary_processing
                WHERE {where}
                ORDER BY payroll_period DESC, processing_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_processing(r) for r in fetchall(cur)], total

    def get_processing(self, processing_id: int) -> Optional[SalaryProcessing]:
        with db_transaction(self._conn_factory, "fetch salary processing") as cur:
            cur.execute(
                f"SELECT {_PROCESSING_COLUMNS} FROM salary_processing WHERE processing_id=%s", (int(processing_id),)
            )
            row = fetchone(cur)
            return _to_processing(row) if row else None

    def find_processing(self, *, employee_id: int, payroll_period: str) -> Optional[SalaryProcessing]:
        with db_transaction(self._conn_factory, "fetch salary processing") as cur:
            cur.execute(
                f"SELECT {_PROCESSING_COLUMNS} FROM salary_processing WHERE employee_id=%s AND payroll_period=%s",
                (int(employee_id), payroll_period),
            )
            row = fetchone(cur)
            return _to_processing(row) if row else None

    def create_processing(self, record: SalaryProcessing) -> int:
        with db_transaction(self._conn_factory, "process salary") as cur:
            cur.execute(
                """
                INSERT INTO salary_processing(
                    employee_id, payroll_period, basic_salary, allowances, bonus, gross_salary,
                    provident_fund, tax_amount, advance_deduction, other_deductions, deductions, net_salary,
                    days_worked, days_in_month, status, processed_by, processed_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.payroll_period,
                    record.basic_salary,
                    record.allowances,
                    record.bonus,
                    record.gross_salary,
                    record.provident_fund,
                    record.tax_amount,
                    record.advance_deduction,
                    record.other_deductions,
                    record.deductions,
                    record.net_salary,
                    record.days_worked,
                    record.days_in_month,
                    record.status.value,
                    record.processed_by,
                    record.processed_at,
                ),
            )
            return int(cur.lastrowid)

    def save_processing_status(self, record: SalaryProcessing, *, expected: SalaryStatus) -> bool:
        with db_transaction(self._conn_factory, "update salary status") as cur:
            cur.execute(_UPDATE_STATUS_SQL, _status_params(record, expected))
            return cur.rowcount == 1

    def approve_with_slip(self, record: SalaryProcessing, slip: NewSalarySlip, *, expected: SalaryStatus) -> bool:
        with db_transaction(self._conn_factory, "approve salary") as cur:
            cur.execute(_UPDATE_STATUS_SQL, _status_params(record, expected))
            if cur.rowcount != 1:
                return False
            cur.execute(
                """
                INSERT INTO salary_slips(
                    processing_id, employee_id, payroll_period, slip_number,
                    gross_salary, total_deductions, net_salary
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    slip.processing_id,
                    slip.employee_id,
                    slip.payroll_period,
                    slip.slip_number,
                    slip.gross_salary,
                    slip.total_deductions,
                    slip.net_salary,
                ),
            )
            return True

    def processings_for_period(self, payroll_period: str) -> Sequence[SalaryProcessing]:
        with db_transaction(self._conn_factory, "fetch payroll summary") as cur:
            cur.execute(
                f"SELECT {_PROCESSING_COLUMNS} FROM salary_processing WHERE payroll_period=%s",
                (payroll_period,),
            )
            return [_to_processing(r) for r in fetchall(cur)]

    def paid_processings_between(self, *, employee_id: int, start_period: str, end_period: str) -> Sequence[SalaryProcessing]:
        with db_transaction(self._conn_factory, "calculate tax") as cur:
            cur.execute(
                f"""
                SELECT {_PROCESSING_COLUMNS}
                FROM salary_processing
                WHERE employee_id=%s AND status=%s AND payroll_period BETWEEN %s AND %s
                ORDER BY payroll_period
                """,
                (int(employee_id), SalaryStatus.PAID.value, start_period, end_period),
            )
            return [_to_processing(r) for r in fetchall(cur)]

    # -------- Salary slips --------
    def list_slips(self, *, employee_id: int, limit: int) -> Sequence[SalarySlip]:
        with db_transaction(self._conn_factory, "fetch salary slips") as cur:
            cur.execute(
                f"""
                SELECT {_SLIP_COLUMNS}
                FROM salary_slips
                WHERE employee_id=%s
                ORDER BY payroll_period DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_slip(r) for r in fetchall(cur)]
