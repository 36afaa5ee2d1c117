from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Pagination
from ..core.enums import ACTIVE_APPLICATION_STATUSES, ApplicationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import count, db_transaction, fetchall, fetchone, where_clause
from .model import AdmissionApplication, EligibilityCriteria, MeritEntry, NewApplication
from .repository import AdmissionRepository

_APPLICATION_COLUMNS = """
    application_id, application_number, user_id, program_id, batch, status, applicant_name,
    eligibility_score, merit_rank, reviewed_by, reviewed_at, submitted_at
"""


def _to_application(row: dict) -> AdmissionApplication:
    score = row.get("eligibility_score")
    return AdmissionApplication(
        application_id=int(row["application_id"]),
        application_number=row["application_number"],
        user_id=int(row["user_id"]),
        program_id=int(row["program_id"]),
        batch=row["batch"],
        status=ApplicationStatus(row["status"]),
        applicant_name=row.get("applicant_name"),
        eligibility_score=Decimal(score) if score is not None else None,
        merit_rank=row.get("merit_rank"),
        reviewed_by=row.get("reviewed_by"),
        reviewed_at=row.get("reviewed_at"),
        submitted_at=row.get("submitted_at"),
    )


class MySQLAdmissionRepository(AdmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_applications(
        self,
        *,
        program_id: Optional[int],
        user_id: Optional[int],
        batch: Optional[str],
        status: Optional[ApplicationStatus],
        page: Pagination,
    ) -> tuple[Sequence[AdmissionApplication], int]:
        where, params = where_clause(
            [("program_id", program_id), ("user_id", user_id), ("batch", batch), ("status", status)]
        )
        with db_transaction(self._conn_factory, "fetch applications") as cur:
            total = count(cur, "admission_applications", where, params)
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM admission_applications
                WHERE {where}
                ORDER BY submitted_at DESC, application_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, page.limit, page.offset),
            )
            return [_to_application(r) for r in fetchall(cur)], total

    def get_application(self, application_id: int) -> Optional[AdmissionApplication]:
        with db_transaction(self._conn_factory, "fetch application") as cur:
            cur.execute(
                f"SELECT {_APPLICATION_COLUMNS} FROM admission_applications WHERE application_id=%s",
                (int(application_id),),
            )
            row = fetchone(cur)
            return _to_application(row) if row else None

    def find_active_application(self, *, user_id: int, program_id: int) -> Optional[AdmissionApplication]:
        statuses = sorted(s.value for s in ACTIVE_APPLICATION_STATUSES)
        placeholders = ",".join(["%s"] * len(statuses))
        with db_transaction(self._conn_factory, "fetch application") as cur:
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM admission_applications
                WHERE user_id=%s AND program_id=%s AND status IN ({placeholders})
                LIMIT 1
                """,
                (int(user_id), int(program_id), *statuses),
            )
            row = fetchone(cur)
            return _to_application(row) if row else None

    def create_application(self, data: NewApplication) -> int:
        with db_transaction(self._conn_factory, "submit application") as cur:
            cur.execute(
                """
                INSERT INTO admission_applications(
                    application_number, user_id, program_id, batch, applicant_name, status, submitted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,NOW())
                """,
                (
                    data.application_number,
                    data.user_id,
                    data.program_id,
                    data.batch,
                    data.applicant_name,
                    ApplicationStatus.SUBMITTED.value,
                ),
            )
            return int(cur.lastrowid)

    def save_application_status(self, updated: AdmissionApplication, *, expected: ApplicationStatus) -> bool:
        with db_transaction(self._conn_factory, "update application status") as cur:
            cur.execute(
                """
                UPDATE admission_applications
                SET status=%s, eligibility_score=%s, merit_rank=%s, reviewed_by=%s, reviewed_at=%s
                WHERE application_id=%s AND status=%s
                """,
                (
                    updated.status.value,
                    updated.eligibility_score,
                    updated.merit_rank,
                    updated.reviewed_by,
                    updated.reviewed_at,
                    updated.application_id,
                    expected.value,
                ),
            )
            return cur.rowcount == 1

    def get_criteria(self, program_id: int) -> Optional[EligibilityCriteria]:
        with db_transaction(self._conn_factory, "fetch eligibility criteria") as cur:
            cur.execute(
                """
                SELECT criteria_id, program_id, minimum_marks, minimum_cgpa, age_limit
                FROM eligibility_criteria
                WHERE program_id=%s AND is_active=1
                ORDER BY criteria_id DESC
                LIMIT 1
                """,
                (int(program_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return EligibilityCriteria(
                criteria_id=int(row["criteria_id"]),
                program_id=int(row["program_id"]),
                minimum_marks=Decimal(row["minimum_marks"]) if row.get("minimum_marks") is not None else None,
                minimum_cgpa=Decimal(row["minimum_cgpa"]) if row.get("minimum_cgpa") is not None else None,
                age_limit=row.get("age_limit"),
            )

    def eligible_applications(self, *, program_id: int, batch: str) -> Sequence[AdmissionApplication]:
        with db_transaction(self._conn_factory, "fetch eligible applications") as cur:
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM admission_applications
                WHERE program_id=%s AND batch=%s AND status=%s
                ORDER BY submitted_at, application_id
                """,
                (int(program_id), batch, ApplicationStatus.ELIGIBLE.value),
            )
            return [_to_application(r) for r in fetchall(cur)]

    def save_merit_list(
        self, *, program_id: int, batch: str, total_seats: int, entries: Sequence[MeritEntry], actor_id: Optional[int]
    ) -> int:
        with db_transaction(self._conn_factory, "generate merit list") as cur:
            cur.execute(
                """
                INSERT INTO merit_lists(program_id, batch, total_seats, published_date, generated_by)
                VALUES(%s,%s,%s,CURDATE(),%s)
                """,
                (int(program_id), batch, int(total_seats), actor_id),
            )
            merit_list_id = int(cur.lastrowid)
            reviewed_at = now_local()
            for entry in entries:
                cur.execute(
                    """
                    UPDATE admission_applications
                    SET status=%s, merit_rank=%s, reviewed_by=%s, reviewed_at=%s
                    WHERE application_id=%s
                    """,
                    (entry.status.value, entry.rank, actor_id, reviewed_at, entry.application_id),
                )
                cur.execute(
                    """
                    INSERT INTO merit_list_entries(merit_list_id, application_id, merit_score, merit_rank, status)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (merit_list_id, entry.application_id, entry.merit_score, entry.rank, entry.status.value),
                )
            return merit_list_id
