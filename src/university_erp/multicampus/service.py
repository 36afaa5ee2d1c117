from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional

from ..common.datetime_utils import today_local
from ..common.pagination import Page, Pagination
from ..common.validators import optional_date, optional_text, require_id, require_non_empty
from ..core.enums import TransferStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..workflow.approval import DecisionInput, decide, status_value
from .model import (
    CAMPUS_UPDATABLE,
    Campus,
    CampusReport,
    NewCampus,
    NewTransfer,
    StaffTransfer,
    StudentTransfer,
    TransferFilters,
)
from .repository import MultiCampusRepository

logger = logging.getLogger(__name__)

_REQUIRED_CAMPUS_FIELDS = ("name", "code", "address", "city", "province")


def _effective_date_guard(effective_date):
    def guard(transfer, to) -> None:
        if status_value(to) == TransferStatus.APPROVED.value and effective_date is None:
            raise ValidationError("Effective date is required when approving transfer")

    return guard


class MultiCampusService:
    def __init__(self, repo: MultiCampusRepository):
        self._repo = repo

    # -------- Campuses --------
    def list_campuses(
        self, *, city: Optional[str] = None, is_active: Optional[bool] = None, page: Pagination
    ) -> Page[Campus]:
        items, total = self._repo.list_campuses(city=optional_text(city), is_active=is_active, page=page)
        return Page(items=items, total=total, pagination=page)

    def get_campus(self, campus_id: int) -> Campus:
        campus = self._repo.get_campus(int(campus_id))
        if not campus:
            raise NotFoundError("Campus")
        return campus

    def create_campus(self, **fields: Any) -> Campus:
        values = {name: require_non_empty(fields.get(name), name.capitalize()) for name in _REQUIRED_CAMPUS_FIELDS}
        values["code"] = values["code"].upper()
        if self._repo.get_campus_by_code(values["code"]):
            raise ConflictError("Campus with this code already exists")

        campus_id = self._repo.create_campus(
            NewCampus(
                phone=optional_text(fields.get("phone")),
                email=optional_text(fields.get("email")),
                established_date=optional_date(fields.get("established_date"), "Established date"),
                **values,
            )
        )
        logger.info("Created campus %s (%s)", campus_id, values["code"])
        return self.get_campus(campus_id)

    def update_campus(self, campus_id: int, changes: dict) -> Campus:
        current = self.get_campus(campus_id)
        cleaned: dict[str, Any] = {}
        for key, value in changes.items():
            if key not in CAMPUS_UPDATABLE:
                continue
            if key in _REQUIRED_CAMPUS_FIELDS:
                value = require_non_empty(value, key.capitalize())
            elif key == "is_active":
                value = bool(value)
            else:
                value = optional_text(value)
            cleaned[key] = value
        if not cleaned:
            raise ValidationError("No valid fields to update")

        if "code" in cleaned:
            cleaned["code"] = cleaned["code"].upper()
            if cleaned["code"] != current.code:
                other = self._repo.get_campus_by_code(cleaned["code"])
                if other and other.campus_id != current.campus_id:
                    raise ConflictError("Campus with this code already exists")

        self._repo.update_campus(current.campus_id, cleaned)
        return self.get_campus(campus_id)

    def campus_report(self, campus_id: int, report_date: Any = None) -> CampusReport:
        campus = self.get_campus(campus_id)
        counts = self._repo.transfer_counts(campus.campus_id)
        return CampusReport(
            campus_id=campus.campus_id,
            campus_name=campus.name,
            report_date=optional_date(report_date, "Report date") or today_local(),
            total_staff=self._repo.count_staff(campus.campus_id),
            student_transfers_in=counts.get("student_in", {}),
            student_transfers_out=counts.get("student_out", {}),
            staff_transfers_in=counts.get("staff_in", {}),
            staff_transfers_out=counts.get("staff_out", {}),
        )

    # -------- Transfers --------
    def _new_transfer(self, *, subject_id: int, from_campus_id: Any, to_campus_id: Any, reason: Any) -> NewTransfer:
        origin = require_id(from_campus_id, "From campus")
        target = require_id(to_campus_id, "To campus")
        why = require_non_empty(reason, "Reason")
        if origin == target:
            raise ValidationError("From campus and to campus cannot be the same")

        if not self.get_campus(origin).is_active or not self.get_campus(target).is_active:
            raise ValidationError("Both campuses must be active")
        return NewTransfer(
            subject_id=subject_id,
            from_campus_id=origin,
            to_campus_id=target,
            reason=why,
            requested_date=today_local(),
        )

    def _decide_transfer(self, current, decision: DecisionInput, actor_id: int):
        decided = decide(
            current,
            to=decision.status,
            actor_id=actor_id,
            subject="transfers",
            guards=(_effective_date_guard(decision.effective_date),),
            rejection_reason=decision.rejection_reason,
            remarks=decision.remarks,
            require_rejection_reason=True,
        )
        if decision.approving:
            decided = dataclasses.replace(
                decided, effective_date=decision.effective_date, transfer_date=decision.transfer_date
            )
        return decided

    def list_student_transfers(self, *, filters: TransferFilters, page: Pagination) -> Page[StudentTransfer]:
        items, total = self._repo.list_student_transfers(filters, page)
        return Page(items=items, total=total, pagination=page)

    def get_student_transfer(self, transfer_id: int) -> StudentTransfer:
        transfer = self._repo.get_student_transfer(int(transfer_id))
        if not transfer:
            raise NotFoundError("Student transfer")
        return transfer

    def request_student_transfer(
        self, *, student_id: Any, from_campus_id: Any, to_campus_id: Any, reason: Any
    ) -> StudentTransfer:
        data = self._new_transfer(
            subject_id=require_id(student_id, "Student ID"),
            from_campus_id=from_campus_id,
            to_campus_id=to_campus_id,
            reason=reason,
        )
        transfer_id = self._repo.create_student_transfer(data)
        logger.info("Student transfer %s requested for student %s", transfer_id, data.subject_id)
        return self.get_student_transfer(transfer_id)

    def decide_student_transfer(
        self, *, transfer_id: int, decision: DecisionInput, actor_id: int
    ) -> StudentTransfer:
        current = self.get_student_transfer(transfer_id)
        decided = self._decide_transfer(current, decision, actor_id)
        if not self._repo.save_student_transfer_decision(decided, expected=current.status):
            raise ConflictError("Student transfer was already processed by another user")
        return decided

    def list_staff_transfers(self, *, filters: TransferFilters, page: Pagination) -> Page[StaffTransfer]:
        items, total = self._repo.list_staff_transfers(filters, page)
        return Page(items=items, total=total, pagination=page)

    def get_staff_transfer(self, transfer_id: int) -> StaffTransfer:
        transfer = self._repo.get_staff_transfer(int(transfer_id))
        if not transfer:
            raise NotFoundError("Staff transfer")
        return transfer

    def request_staff_transfer(
        self, *, employee_id: Any, from_campus_id: Any, to_campus_id: Any, reason: Any
    ) -> StaffTransfer:
        data = self._new_transfer(
            subject_id=require_id(employee_id, "Staff ID"),
            from_campus_id=from_campus_id,
            to_campus_id=to_campus_id,
            reason=reason,
        )
        transfer_id = self._repo.create_staff_transfer(data)
        logger.info("Staff transfer %s requested for employee %s", transfer_id, data.subject_id)
        return self.get_staff_transfer(transfer_id)

    def decide_staff_transfer(self, *, transfer_id: int, decision: DecisionInput, actor_id: int) -> StaffTransfer:
        current = self.get_staff_transfer(transfer_id)
        decided = self._decide_transfer(current, decision, actor_id)
        if not self._repo.save_staff_transfer_decision(decided, expected=current.status):
            raise ConflictError("Staff transfer was already processed by another user")
        return decided
