from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from ..core.enums import SalaryStatus
from .model import NewSalarySlip, SalaryProcessing, SalarySlip, SalaryStructure


class PayrollRepository(Protocol):
    # Salary structures
    def list_structures(
        self, *, employee_id: Optional[int], is_active: Optional[bool], page: Pagination
    ) -> tuple[Sequence[SalaryStructure], int]:
        raise NotImplementedError

    def get_structure(self, structure_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def get_active_structure(self, employee_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def create_structure(self, structure: SalaryStructure) -> int:
        """Insert a structure; any other active structure of the employee is deactivated in the same unit."""

        raise NotImplementedError

    def update_structure(self, structure: SalaryStructure) -> bool:
        raise NotImplementedError

    # Salary processing
    def list_processings(
        self,
        *,
        employee_id: Optional[int],
        payroll_period: Optional[str],
        status: Optional[SalaryStatus],
        page: Pagination,
    ) -> tuple[Sequence[SalaryProcessing], int]:
        raise NotImplementedError

    def get_processing(self, processing_id: int) -> Optional[SalaryProcessing]:
        raise NotImplementedError

    def find_processing(self, *, employee_id: int, payroll_period: str) -> Optional[SalaryProcessing]:
        raise NotImplementedError

    def create_processing(self, record: SalaryProcessing) -> int:
        raise NotImplementedError

    def save_processing_status(self, record: SalaryProcessing, *, expected: SalaryStatus) -> bool:
        """Conditional status update; False when the stored status is no longer ``expected``."""

        raise NotImplementedError

    def approve_with_slip(self, record: SalaryProcessing, slip: NewSalarySlip, *, expected: SalaryStatus) -> bool:
        """Approve and issue the slip atomically."""

        raise NotImplementedError

    def processings_for_period(self, payroll_period: str) -> Sequence[SalaryProcessing]:
        raise NotImplementedError

    def paid_processings_between(self, *, employee_id: int, start_period: str, end_period: str) -> Sequence[SalaryProcessing]:
        raise NotImplementedError

    # Salary slips
    def list_slips(self, *, employee_id: int, limit: int) -> Sequence[SalarySlip]:
        raise NotImplementedError
