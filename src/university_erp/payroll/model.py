from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import SalaryStatus

ZERO = Decimal("0")


@dataclass(frozen=True)
class SalaryStructure:
    structure_id: int
    employee_id: int
    basic_salary: Decimal
    effective_from: date
    house_rent_allowance: Decimal = ZERO
    medical_allowance: Decimal = ZERO
    transport_allowance: Decimal = ZERO
    other_allowances: Decimal = ZERO
    provident_fund: Decimal = ZERO
    tax_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO
    gross_salary: Decimal = ZERO
    net_salary: Decimal = ZERO
    effective_to: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SalaryBreakdown:
    """Result of one salary computation, all amounts in whole rupees."""

    basic_salary: Decimal
    allowances: Decimal
    bonus: Decimal
    gross_salary: Decimal
    provident_fund: Decimal
    tax_amount: Decimal
    other_deductions: Decimal
    advance_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class SalaryProcessing:
    processing_id: int
    employee_id: int
    payroll_period: str
    basic_salary: Decimal
    allowances: Decimal
    bonus: Decimal
    gross_salary: Decimal
    provident_fund: Decimal
    tax_amount: Decimal
    advance_deduction: Decimal
    other_deductions: Decimal
    deductions: Decimal
    net_salary: Decimal
    days_worked: int
    days_in_month: int
    status: SalaryStatus
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None
    payment_date: Optional[date] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SalarySlip:
    slip_id: int
    processing_id: int
    employee_id: int
    payroll_period: str
    slip_number: str
    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    issued_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewSalarySlip:
    processing_id: int
    employee_id: int
    payroll_period: str
    slip_number: str
    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class TaxCalculation:
    employee_id: int
    tax_year: str
    taxable_income: Decimal
    tax_liability: Decimal
    tax_paid: Decimal
    tax_refund: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    payroll_period: str
    total_employees: int
    total_gross_salary: Decimal
    total_deductions: Decimal
    total_net_salary: Decimal
    total_tax: Decimal
    processed_employees: int
    pending_employees: int


STRUCTURE_AMOUNT_FIELDS = (
    "basic_salary",
    "house_rent_allowance",
    "medical_allowance",
    "transport_allowance",
    "other_allowances",
    "provident_fund",
    "tax_deduction",
    "other_deductions",
)
