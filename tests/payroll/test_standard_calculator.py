from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from university_erp.payroll.calculator.standard_calculator import StandardPayrollCalculator, to_rupees
from university_erp.payroll.model import SalaryStructure


def _structure(**amounts) -> SalaryStructure:
    values = {k: Decimal(str(v)) for k, v in amounts.items()}
    values.setdefault("basic_salary", Decimal("0"))
    return SalaryStructure(structure_id=1, employee_id=1, effective_from=date(2026, 1, 1), **values)


def test_gross_and_net_for_full_structure():
    calc = StandardPayrollCalculator()
    s = _structure(
        basic_salary=100000,
        house_rent_allowance=50000,
        medical_allowance=10000,
        provident_fund=5000,
        tax_deduction=8000,
    )

    assert calc.gross(s) == Decimal("160000")
    assert calc.net(s) == Decimal("147000")


def test_zero_allowances_and_deductions():
    calc = StandardPayrollCalculator()
    s = _structure(basic_salary=75000)

    assert calc.gross(s) == Decimal("75000")
    assert calc.net(s) == Decimal("75000")


@pytest.mark.parametrize(
    "amounts",
    [
        dict(basic_salary=1, transport_allowance=2, other_allowances=3, other_deductions=1),
        dict(basic_salary=55555, house_rent_allowance=22222, medical_allowance=3333, provident_fund=4444),
        dict(basic_salary=250000, other_allowances=12500, tax_deduction=30000, other_deductions=2500),
        dict(basic_salary="1000.25", medical_allowance="0.25", provident_fund="0.40"),
    ],
)
def test_net_is_basic_plus_allowances_minus_deductions(amounts):
    calc = StandardPayrollCalculator()
    s = _structure(**amounts)
    allowances = s.house_rent_allowance + s.medical_allowance + s.transport_allowance + s.other_allowances
    deductions = s.provident_fund + s.tax_deduction + s.other_deductions

    assert calc.gross(s) == s.basic_salary + allowances
    assert calc.net(s) == s.basic_salary + allowances - deductions


def test_structure_totals_keep_fractional_amounts():
    calc = StandardPayrollCalculator()
    s = _structure(basic_salary="1000.25", medical_allowance="0.25", provident_fund="0.40")

    assert calc.gross(s) == Decimal("1000.50")
    assert calc.net(s) == Decimal("1000.10")


def test_amounts_round_half_up_to_whole_rupees():
    assert to_rupees(Decimal("100.5")) == Decimal("101")
    assert to_rupees(Decimal("100.49")) == Decimal("100")
    s = _structure(basic_salary="1000.25", medical_allowance="0.25")
    assert StandardPayrollCalculator().breakdown(s, days_worked=30, days_in_month=30).gross_salary == Decimal("1000")


@pytest.mark.parametrize(
    "annual, expected",
    [
        (0, 0),
        (600000, 0),
        (1200000, 15000),
        (2400000, 165000),
        (3000000, 285000),
    ],
)
def test_annual_income_tax_is_progressive(annual, expected):
    assert StandardPayrollCalculator().annual_income_tax(Decimal(annual)) == Decimal(expected)


def test_breakdown_full_month_matches_structure_totals():
    calc = StandardPayrollCalculator()
    s = _structure(
        basic_salary=100000,
        house_rent_allowance=50000,
        medical_allowance=10000,
        provident_fund=5000,
        tax_deduction=8000,
    )

    b = calc.breakdown(s, days_worked=30, days_in_month=30)

    assert b.gross_salary == Decimal("160000")
    assert b.tax_amount == Decimal("8000")
    assert b.total_deductions == Decimal("13000")
    assert b.net_salary == Decimal("147000")


def test_breakdown_prorates_and_adds_bonus_and_advance():
    calc = StandardPayrollCalculator()
    s = _structure(basic_salary=31000, house_rent_allowance=6200, provident_fund=3100, tax_deduction=1550)

    b = calc.breakdown(s, days_worked=15, days_in_month=31, bonus=Decimal("1000"), advance_deduction=Decimal("500"))

    assert b.basic_salary == Decimal("15000")
    assert b.allowances == Decimal("3000")
    assert b.gross_salary == Decimal("19000")
    assert b.provident_fund == Decimal("1500")
    assert b.tax_amount == Decimal("750")
    assert b.advance_deduction == Decimal("500")
    assert b.net_salary == b.gross_salary - b.total_deductions == Decimal("16250")


def test_breakdown_uses_bracket_tax_without_fixed_deduction():
    calc = StandardPayrollCalculator()
    s = _structure(basic_salary=200000)

    b = calc.breakdown(s, days_worked=30, days_in_month=30)

    # 2,400,000 a year -> 165,000 tax -> 13,750 a month
    assert b.tax_amount == Decimal("13750")
    assert b.net_salary == Decimal("186250")
