from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..common.pagination import Pagination
from ..core.enums import TransferStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import (
    CAMPUS_UPDATABLE,
    Campus,
    NewCampus,
    NewTransfer,
    StaffTransfer,
    StudentTransfer,
    TransferFilters,
)
from .repository import MultiCampusRepository

_CAMPUS_COLUMNS = """
    campus_id, name, code, address, city, province, phone, email, established_date, is_active, created_at
"""

_TRANSFER_COLUMNS = """
    transfer_id, {subject}, from_campus_id, to_campus_id, reason, status, requested_date,
    effective_date, transfer_date, approved_by, approved_at, rejection_reason, remarks, created_at
"""

# (table, subject column)
_STUDENT = ("student_transfers", "student_id")
_STAFF = ("staff_transfers", "employee_id")


def _to_campus(row: dict) -> Campus:
    return Campus(
        campus_id=int(row["campus_id"]),
        name=row["name"],
        code=row["code"],
        address=row["address"],
        city=row["city"],
        province=row["province"],
        phone=row.get("phone"),
        email=row.get("email"),
        established_date=row.get("established_date"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


def _transfer_fields(row: dict) -> dict:
    return dict(
        transfer_id=int(row["transfer_id"]),
        from_campus_id=int(row["from_campus_id"]),
        to_campus_id=int(row["to_campus_id"]),
        reason=row["reason"],
        status=TransferStatus(row["status"]),
        requested_date=row["requested_date"],
        effective_date=row.get("effective_date"),
        transfer_date=row.get("transfer_date"),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        rejection_reason=row.get("rejection_reason"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
    )


def _to_student_transfer(row: dict) -> StudentTransfer:
    return StudentTransfer(student_id=int(row["student_id"]), **_transfer_fields(row))


def _to_staff_transfer(row: dict) -> StaffTransfer:
    return StaffTransfer(employee_id=int(row["employee_id"]), **_transfer_fields(row))


class MySQLMultiCampusRepository(MultiCampusRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Campuses --------
    def list_campuses(
        self, *, city: Optional[str], is_active: Optional[bool], page: Pagination
    ) -> tuple[Sequence[Campus], int]:
        where, params = where_clause([("city", city), ("is_active", None if is_active is None else int(is_active))])
        with db_transaction(self._conn_factory, "fetch campuses") as cur:
            total = count(cur, "campuses", where, params)
            cur.execute(
                f"""
                SELECT {_CAMPUS_COLUMNS}
                FROM campuses
                WHERE {where}
                ORDER BY name
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_campus(r) for r in fetchall(cur)], total

    def get_campus(self, campus_id: int) -> Optional[Campus]:
        with db_transaction(self._conn_factory, "fetch campus") as cur:
            cur.execute(f"SELECT {_CAMPUS_COLUMNS} FROM campuses WHERE campus_id=%s", (int(campus_id),))
            row = fetchone(cur)
            return _to_campus(row) if row else None

    def get_campus_by_code(self, code: str) -> Optional[Campus]:
        with db_transaction(self._conn_factory, "fetch campus") as cur:
            cur.execute(f"SELECT {_CAMPUS_COLUMNS} FROM campuses WHERE code=%s", (code,))
            row = fetchone(cur)
            return _to_campus(row) if row else None

    def create_campus(self, data: NewCampus) -> int:
        with db_transaction(self._conn_factory, "create campus") as cur:
            cur.execute(
                """
                INSERT INTO campuses(name, code, address, city, province, phone, email, established_date, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    data.name,
                    data.code,
                    data.address,
                    data.city,
                    data.province,
                    data.phone,
                    data.email,
                    data.established_date,
                ),
            )
            return int(cur.lastrowid)

    def update_campus(self, campus_id: int, changes: dict) -> bool:
        columns = [c for c in changes if c in CAMPUS_UPDATABLE]
        if not columns:
            return False
        assignments = ", ".join(f"{c}=%s" for c in columns)
        with db_transaction(self._conn_factory, "update campus") as cur:
            cur.execute(
                f"UPDATE campuses SET {assignments} WHERE campus_id=%s",
                (*(changes[c] for c in columns), int(campus_id)),
            )
            return cur.rowcount > 0

    # -------- Transfers (shared SQL) --------
    def _list_transfers(
        self, kind: tuple[str, str], mapper: Callable, filters: TransferFilters, page: Pagination
    ) -> tuple[list, int]:
        table, subject = kind
        where, params = where_clause(
            [
                (subject, filters.subject_id),
                ("from_campus_id", filters.from_campus_id),
                ("to_campus_id", filters.to_campus_id),
                ("status", filters.status),
            ]
        )
        with db_transaction(self._conn_factory, f"fetch {table}") as cur:
            total = count(cur, table, where, params)
            cur.execute(
                f"""
                SELECT {_TRANSFER_COLUMNS.format(subject=subject)}
                FROM {table}
                WHERE {where}
                ORDER BY requested_date DESC, transfer_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [mapper(r) for r in fetchall(cur)], total

    def _get_transfer(self, kind: tuple[str, str], mapper: Callable, transfer_id: int):
        table, subject = kind
        with db_transaction(self._conn_factory, f"fetch {table}") as cur:
            cur.execute(
                f"SELECT {_TRANSFER_COLUMNS.format(subject=subject)} FROM {table} WHERE transfer_id=%s",
                (int(transfer_id),),
            )
            row = fetchone(cur)
            return mapper(row) if row else None

    def _create_transfer(self, kind: tuple[str, str], data: NewTransfer) -> int:
        table, subject = kind
        with db_transaction(self._conn_factory, f"create {table}") as cur:
            cur.execute(
                f"""
                INSERT INTO {table}({subject}, from_campus_id, to_campus_id, reason, status, requested_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.subject_id,
                    data.from_campus_id,
                    data.to_campus_id,
                    data.reason,
                    TransferStatus.PENDING.value,
                    data.requested_date,
                ),
            )
            return int(cur.lastrowid)

    def _save_decision(self, kind: tuple[str, str], decided, expected: TransferStatus) -> bool:
        table, _ = kind
        with db_transaction(self._conn_factory, f"update {table} status") as cur:
            cur.execute(
                f"""
                UPDATE {table}
                SET status=%s, effective_date=%s, transfer_date=%s, approved_by=%s, approved_at=%s, rejection_reason=%s, remarks=%s
                WHERE transfer_id=%s AND status=%s
                """,
                (
                    decided.status.value,
                    decided.effective_date,
                    decided.transfer_date,
                    decided.approved_by,
                    decided.approved_at,
                    decided.rejection_reason,
                    decided.remarks,
                    decided.transfer_id,
                    expected.value,
                ),
            )
            return cur.rowcount == 1

    # -------- Student transfers --------
    def list_student_transfers(
        self, filters: TransferFilters, page: Pagination
    ) -> tuple[Sequence[StudentTransfer], int]:
        return self._list_transfers(_STUDENT, _to_student_transfer, filters, page)

    def get_student_transfer(self, transfer_id: int) -> Optional[StudentTransfer]:
        return self._get_transfer(_STUDENT, _to_student_transfer, transfer_id)

    def create_student_transfer(self, data: NewTransfer) -> int:
        return self._create_transfer(_STUDENT, data)

    def save_student_transfer_decision(self, decided: StudentTransfer, *, expected: TransferStatus) -> bool:
        return self._save_decision(_STUDENT, decided, expected)

    # -------- Staff transfers --------
    def list_staff_transfers(self, filters: TransferFilters, page: Pagination) -> tuple[Sequence[StaffTransfer], int]:
        return self._list_transfers(_STAFF, _to_staff_transfer, filters, page)

    def get_staff_transfer(self, transfer_id: int) -> Optional[StaffTransfer]:
        return self._get_transfer(_STAFF, _to_staff_transfer, transfer_id)

    def create_staff_transfer(self, data: NewTransfer) -> int:
        return self._create_transfer(_STAFF, data)

    def save_staff_transfer_decision(self, decided: StaffTransfer, *, expected: TransferStatus) -> bool:
        return self._save_decision(_STAFF, decided, expected)

    # -------- Reports --------
    def count_staff(self, campus_id: int) -> int:
        with db_transaction(self._conn_factory, "build campus report") as cur:
            return count(cur, "employees", "campus_id=%s AND is_active=1", [int(campus_id)])

    def transfer_counts(self, campus_id: int) -> dict[str, dict[str, int]]:
        out: dict[str, dict[str, int]] = {}
        with db_transaction(self._conn_factory, "build campus report") as cur:
            for label, (table, _) in (("student", _STUDENT), ("staff", _STAFF)):
                for direction, column in (("in", "to_campus_id"), ("out", "from_campus_id")):
                    cur.execute(
                        f"SELECT status, COUNT(*) AS total FROM {table} WHERE {column}=%s GROUP BY status",
                        (int(campus_id),),
                    )
                    out[f"{label}_{direction}"] = {r["status"]: int(r["total"]) for r in fetchall(cur)}
        return out
