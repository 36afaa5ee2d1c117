from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from ..core.enums import ApplicationStatus
from .model import AdmissionApplication, EligibilityCriteria, MeritEntry, NewApplication


class AdmissionRepository(Protocol):
    def list_applications(
        self,
        *,
        program_id: Optional[int],
        user_id: Optional[int],
        batch: Optional[str],
        status: Optional[ApplicationStatus],
        page: Pagination,
    ) -> tuple[Sequence[AdmissionApplication], int]:
        raise NotImplementedError

    def get_application(self, application_id: int) -> Optional[AdmissionApplication]:
        raise NotImplementedError

    def find_active_application(self, *, user_id: int, program_id: int) -> Optional[AdmissionApplication]:
        raise NotImplementedError

    def create_application(self, data: NewApplication) -> int:
        raise NotImplementedError

    def save_application_status(self, updated: AdmissionApplication, *, expected: ApplicationStatus) -> bool:
        """Conditional update of status, score and review stamp."""

        raise NotImplementedError

    def get_criteria(self, program_id: int) -> Optional[EligibilityCriteria]:
        raise NotImplementedError

    def eligible_applications(self, *, program_id: int, batch: str) -> Sequence[AdmissionApplication]:
        raise NotImplementedError

    def save_merit_list(
        self, *, program_id: int, batch: str, total_seats: int, entries: Sequence[MeritEntry], actor_id: Optional[int]
    ) -> int:
        """Persist the header and every entry's rank/status in one unit; returns the merit list id."""

        raise NotImplementedError
