from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import INCOME_TAX_BRACKETS
from ..model import ZERO, SalaryBreakdown, SalaryStructure
from .base import PayrollCalculator

RUPEE = Decimal("1")


def to_rupees(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(RUPEE, rounding=ROUND_HALF_UP)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: gross = basic + allowances, net = gross - deductions.

    Structure totals are exact sums of the stored components. In a breakdown
    the components are pro-rated by ``days_worked / days_in_month`` and rounded
    to whole rupees (half up) one by one, so gross and net are exact sums of
    what the slip shows.
    """

    def __init__(self, brackets=INCOME_TAX_BRACKETS):
        self._brackets = brackets

    def gross(self, structure: SalaryStructure) -> Decimal:
        return (
            structure.basic_salary
            + structure.house_rent_allowance
            + structure.medical_allowance
            + structure.transport_allowance
            + structure.other_allowances
        )

    def net(self, structure: SalaryStructure) -> Decimal:
        deductions = structure.provident_fund + structure.tax_deduction + structure.other_deductions
        return self.gross(structure) - deductions

    def annual_income_tax(self, annual_income: Decimal) -> Decimal:
        """Progressive tax: each slab's rate applies only to the income inside it."""
        income = Decimal(annual_income)
        tax = ZERO
        lower = ZERO
        for upper, rate in self._brackets:
            if income <= lower:
                break
            top = income if upper is None else min(income, upper)
            tax += (top - lower) * rate
            if upper is None:
                break
            lower = upper
        return to_rupees(tax)

    def monthly_income_tax(self, monthly_gross: Decimal) -> Decimal:
        return to_rupees(self.annual_income_tax(Decimal(monthly_gross) * 12) / 12)

    def breakdown(
        self,
        structure: SalaryStructure,
        *,
        days_worked: int,
        days_in_month: int,
        bonus: Decimal = ZERO,
        advance_deduction: Decimal = ZERO,
    ) -> SalaryBreakdown:
        ratio = Decimal(days_worked) / Decimal(days_in_month)

        def prorate(amount: Decimal) -> Decimal:
            return to_rupees(Decimal(amount or 0) * ratio)

        basic = prorate(structure.basic_salary)
        allowances = (
            prorate(structure.house_rent_allowance)
            + prorate(structure.medical_allowance)
            + prorate(structure.transport_allowance)
            + prorate(structure.other_allowances)
        )
        bonus = to_rupees(bonus)
        gross = basic + allowances + bonus

        if structure.tax_deduction > 0:
            tax = prorate(structure.tax_deduction)
        else:
            tax = self.monthly_income_tax(gross)

        provident_fund = prorate(structure.provident_fund)
        other_deductions = prorate(structure.other_deductions)
        advance = to_rupees(advance_deduction)
        total_deductions = provident_fund + tax + other_deductions + advance

        return SalaryBreakdown(
            basic_salary=basic,
            allowances=allowances,
            bonus=bonus,
            gross_salary=gross,
            provident_fund=provident_fund,
            tax_amount=tax,
            other_deductions=other_deductions,
            advance_deduction=advance,
            total_deductions=total_deductions,
            net_salary=gross - total_deductions,
        )
