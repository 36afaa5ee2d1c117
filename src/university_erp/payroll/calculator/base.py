from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import SalaryBreakdown, SalaryStructure


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def gross(self, structure: SalaryStructure) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def net(self, structure: SalaryStructure) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def annual_income_tax(self, annual_income: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def breakdown(
        self,
        structure: SalaryStructure,
        *,
        days_worked: int,
        days_in_month: int,
        bonus: Decimal = Decimal("0"),
        advance_deduction: Decimal = Decimal("0"),
    ) -> SalaryBreakdown:
        raise NotImplementedError
