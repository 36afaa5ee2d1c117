from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.pagination import Pagination
from ..core.enums import CertificateRequestStatus, CertificateType, DeliveryMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import Certificate, CertificateRequest, NewCertificate, NewCertificateRequest
from .repository import CertificationRepository

_REQUEST_COLUMNS = """
    request_id, student_id, certificate_type, purpose, delivery_method, delivery_address,
    fee_amount, fee_paid, status, requested_date, approved_by, approved_at, processed_by,
    rejection_reason, remarks, created_at
"""

_CERTIFICATE_COLUMNS = """
    certificate_id, request_id, student_id, certificate_type, certificate_number,
    verification_code, issue_date, expiry_date, metadata, qr_code_url, pdf_url,
    is_verified, verified_at, issued_by, created_at
"""


def _to_request(row: dict) -> CertificateRequest:
    return CertificateRequest(
        request_id=int(row["request_id"]),
        student_id=int(row["student_id"]),
        certificate_type=CertificateType(row["certificate_type"]),
        purpose=row["purpose"],
        delivery_method=DeliveryMethod(row["delivery_method"]),
        status=CertificateRequestStatus(row["status"]),
        requested_date=row["requested_date"],
        delivery_address=row.get("delivery_address"),
        fee_amount=Decimal(row.get("fee_amount") or 0),
        fee_paid=bool(row.get("fee_paid")),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        processed_by=row.get("processed_by"),
        rejection_reason=row.get("rejection_reason"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
    )


def _to_certificate(row: dict) -> Certificate:
    raw_meta = row.get("metadata")
    return Certificate(
        certificate_id=int(row["certificate_id"]),
        request_id=int(row["request_id"]),
        student_id=int(row["student_id"]),
        certificate_type=CertificateType(row["certificate_type"]),
        certificate_number=row["certificate_number"],
        verification_code=row["verification_code"],
        issue_date=row["issue_date"],
        expiry_date=row.get("expiry_date"),
        metadata=json.loads(raw_meta) if raw_meta else {},
        qr_code_url=row.get("qr_code_url"),
        pdf_url=row.get("pdf_url"),
        is_verified=bool(row.get("is_verified")),
        verified_at=row.get("verified_at"),
        issued_by=row.get("issued_by"),
        created_at=row.get("created_at"),
    )


class MySQLCertificationRepository(CertificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Requests --------
    def list_requests(
        self,
        *,
        student_id: Optional[int],
        status: Optional[CertificateRequestStatus],
        certificate_type: Optional[CertificateType],
        page: Pagination,
    ) -> tuple[Sequence[CertificateRequest], int]:
        where, params = where_clause(
            [("student_id", student_id), ("status", status), ("certificate_type", certificate_type)]
        )
        with db_transaction(self._conn_factory, "fetch certificate requests") as cur:
            total = count(cur, "certificate_requests", where, params)
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM certificate_requests
                WHERE {where}
                ORDER BY requested_date DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_request(r) for r in fetchall(cur)], total

    def get_request(self, request_id: int) -> Optional[CertificateRequest]:
        with db_transaction(self._conn_factory, "fetch certificate request") as cur:
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM certificate_requests WHERE request_id=%s", (int(request_id),)
            )
            row = fetchone(cur)
            return _to_request(row) if row else None

    def create_request(self, data: NewCertificateRequest) -> int:
        with db_transaction(self._conn_factory, "create certificate request") as cur:
            cur.execute(
                """
                INSERT INTO certificate_requests(
                    student_id, certificate_type, purpose, delivery_method, delivery_address,
                    fee_amount, fee_paid, status, requested_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,0,%s,%s)
                """,
                (
                    data.student_id,
                    data.certificate_type.value,
                    data.purpose,
                    data.delivery_method.value,
                    data.delivery_address,
                    data.fee_amount,
                    CertificateRequestStatus.PENDING.value,
                    data.requested_date,
                ),
            )
            return int(cur.lastrowid)

    def save_request_status(self, updated: CertificateRequest, *, expected: CertificateRequestStatus) -> bool:
        with db_transaction(self._conn_factory, "update certificate request status") as cur:
            cur.execute(
                """
                UPDATE certificate_requests
                SET status=%s, approved_by=%s, approved_at=%s, processed_by=%s, rejection_reason=%s, remarks=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    updated.status.value,
                    updated.approved_by,
                    updated.approved_at,
                    updated.processed_by,
                    updated.rejection_reason,
                    updated.remarks,
                    updated.request_id,
                    expected.value,
                ),
            )
            return cur.rowcount == 1

    def mark_fee_paid(self, request_id: int) -> bool:
        with db_transaction(self._conn_factory, "mark certificate fee as paid") as cur:
            cur.execute(
                "UPDATE certificate_requests SET fee_paid=1 WHERE request_id=%s AND fee_paid=0",
                (int(request_id),),
            )
            return cur.rowcount == 1

    # -------- Certificates --------
    def list_certificates(
        self,
        *,
        student_id: Optional[int],
        certificate_type: Optional[CertificateType],
        is_verified: Optional[bool],
        page: Pagination,
    ) -> tuple[Sequence[Certificate], int]:
        where, params = where_clause(
            [
                ("student_id", student_id),
                ("certificate_type", certificate_type),
                ("is_verified", None if is_verified is None else int(is_verified)),
            ]
        )
        with db_transaction(self._conn_factory, "fetch certificates") as cur:
            total = count(cur, "certificates", where, params)
            cur.execute(
                f"""
                SELECT {_CERTIFICATE_COLUMNS}
                FROM certificates
                WHERE {where}
                ORDER BY issue_date DESC, certificate_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_certificate(r) for r in fetchall(cur)], total

    def _find_one(self, column: str, value, what: str) -> Optional[Certificate]:
        with db_transaction(self._conn_factory, what) as cur:
            cur.execute(f"SELECT {_CERTIFICATE_COLUMNS} FROM certificates WHERE {column}=%s", (value,))
            row = fetchone(cur)
            return _to_certificate(row) if row else None

    def get_certificate(self, certificate_id: int) -> Optional[Certificate]:
        return self._find_one("certificate_id", int(certificate_id), "fetch certificate")

    def find_by_verification_code(self, verification_code: str) -> Optional[Certificate]:
        return self._find_one("verification_code", verification_code, "verify certificate")

    def find_by_number(self, certificate_number: str) -> Optional[Certificate]:
        return self._find_one("certificate_number", certificate_number, "verify certificate")

    def issue_certificate(self, data: NewCertificate, processing: CertificateRequest) -> Optional[int]:
        with db_transaction(self._conn_factory, "issue certificate") as cur:
            cur.execute(
                """
                UPDATE certificate_requests
                SET status=%s, processed_by=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    processing.status.value,
                    processing.processed_by,
                    processing.request_id,
                    CertificateRequestStatus.APPROVED.value,
                ),
            )
            if cur.rowcount != 1:
                return None
            cur.execute(
                """
                INSERT INTO certificates(
                    request_id, student_id, certificate_type, certificate_number, verification_code,
                    issue_date, expiry_date, metadata, issued_by, is_verified
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    data.request_id,
                    data.student_id,
                    data.certificate_type.value,
                    data.certificate_number,
                    data.verification_code,
                    data.issue_date,
                    data.expiry_date,
                    json.dumps(data.metadata) if data.metadata else None,
                    data.issued_by,
                ),
            )
            return int(cur.lastrowid)

    def mark_verified(self, certificate_id: int, *, verified_at: datetime) -> bool:
        with db_transaction(self._conn_factory, "mark certificate verified") as cur:
            cur.execute(
                "UPDATE certificates SET is_verified=1, verified_at=%s WHERE certificate_id=%s AND is_verified=0",
                (verified_at, int(certificate_id)),
            )
            return cur.rowcount == 1

    def update_urls(self, certificate_id: int, *, qr_code_url: Optional[str], pdf_url: Optional[str]) -> bool:
        with db_transaction(self._conn_factory, "update certificate urls") as cur:
            cur.execute(
                """
                UPDATE certificates
                SET qr_code_url=COALESCE(%s, qr_code_url), pdf_url=COALESCE(%s, pdf_url)
                WHERE certificate_id=%s
                """,
                (qr_code_url, pdf_url, int(certificate_id)),
            )
            return cur.rowcount > 0
