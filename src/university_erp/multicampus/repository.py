from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from ..core.enums import TransferStatus
from .model import Campus, NewCampus, NewTransfer, StaffTransfer, StudentTransfer, TransferFilters


class MultiCampusRepository(Protocol):
    # Campuses
    def list_campuses(
        self, *, city: Optional[str], is_active: Optional[bool], page: Pagination
    ) -> tuple[Sequence[Campus], int]:
        raise NotImplementedError

    def get_campus(self, campus_id: int) -> Optional[Campus]:
        raise NotImplementedError

    def get_campus_by_code(self, code: str) -> Optional[Campus]:
        raise NotImplementedError

    def create_campus(self, data: NewCampus) -> int:
        raise NotImplementedError

    def update_campus(self, campus_id: int, changes: dict) -> bool:
        raise NotImplementedError

    # Transfers
    def list_student_transfers(
        self, filters: TransferFilters, page: Pagination
    ) -> tuple[Sequence[StudentTransfer], int]:
        raise NotImplementedError

    def get_student_transfer(self, transfer_id: int) -> Optional[StudentTransfer]:
        raise NotImplementedError

    def create_student_transfer(self, data: NewTransfer) -> int:
        raise NotImplementedError

    def save_student_transfer_decision(self, decided: StudentTransfer, *, expected: TransferStatus) -> bool:
        raise NotImplementedError

    def list_staff_transfers(self, filters: TransferFilters, page: Pagination) -> tuple[Sequence[StaffTransfer], int]:
        raise NotImplementedError

    def get_staff_transfer(self, transfer_id: int) -> Optional[StaffTransfer]:
        raise NotImplementedError

    def create_staff_transfer(self, data: NewTransfer) -> int:
        raise NotImplementedError

    def save_staff_transfer_decision(self, decided: StaffTransfer, *, expected: TransferStatus) -> bool:
        raise NotImplementedError

    # Reports
    def count_staff(self, campus_id: int) -> int:
        raise NotImplementedError

    def transfer_counts(self, campus_id: int) -> dict[str, dict[str, int]]:
        """Keys ``student_in``, ``student_out``, ``staff_in``, ``staff_out``; each maps status to count."""

        raise NotImplementedError
