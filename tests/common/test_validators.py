from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from university_erp.common.validators import (
    optional_date,
    require_cnic,
    require_date,
    require_enum,
    require_id,
    require_non_negative,
    require_payroll_period,
)
from university_erp.core.enums import PaymentMethod
from university_erp.core.exceptions import ValidationError


def test_cnic_format():
    assert require_cnic(" 35202-1234567-1 ") == "35202-1234567-1"
    with pytest.raises(ValidationError, match="CNIC"):
        require_cnic("3520212345671")


@pytest.mark.parametrize("period", ["2026-00", "2026-13", "26-01", "2026/01"])
def test_bad_payroll_period(period):
    with pytest.raises(ValidationError):
        require_payroll_period(period)


def test_payroll_period():
    assert require_payroll_period("2026-12") == "2026-12"


def test_dates():
    assert require_date("2026-02-03", "Start date") == date(2026, 2, 3)
    assert require_date(datetime(2026, 2, 3, 8, 0), "Start date") == date(2026, 2, 3)
    assert optional_date("", "End date") is None
    with pytest.raises(ValidationError, match="YYYY-MM-DD"):
        require_date("03/02/2026", "Start date")


def test_enum_is_case_insensitive():
    assert require_enum(" Cash ", PaymentMethod, "Payment method") is PaymentMethod.CASH
    with pytest.raises(ValidationError, match="bank_transfer"):
        require_enum("bitcoin", PaymentMethod, "Payment method")


def test_ids_and_amounts():
    assert require_id("4", "Employee ID") == 4
    with pytest.raises(ValidationError):
        require_id("0", "Employee ID")
    assert require_non_negative(None, "Allowance") == Decimal("0")
    with pytest.raises(ValidationError, match="negative"):
        require_non_negative("-1", "Allowance")
