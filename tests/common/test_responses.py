from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from university_erp.common.responses import snake_to_camel, to_json
from university_erp.core.enums import LeaveType


@dataclass(frozen=True)
class _Row:
    leave_id: int
    leave_type: LeaveType
    start_date: date
    total_salary: Decimal
    approved_at: Optional[datetime] = None


def test_snake_to_camel():
    assert snake_to_camel("rejection_reason") == "rejectionReason"
    assert snake_to_camel("total_pages") == "totalPages"
    assert snake_to_camel("status") == "status"


def test_to_json_dataclass():
    row = _Row(
        leave_id=7,
        leave_type=LeaveType.ANNUAL,
        start_date=date(2026, 2, 3),
        total_salary=Decimal("147000.00"),
        approved_at=datetime(2026, 2, 1, 10, 30),
    )

    assert to_json(row) == {
        "leaveId": 7,
        "leaveType": "annual",
        "startDate": "2026-02-03",
        "totalSalary": 147000,
        "approvedAt": "2026-02-01T10:30:00",
    }


def test_to_json_nested_collections():
    data = {"fee_items": [Decimal("12.5"), None], "by_status": {"pending": 2}}

    assert to_json(data) == {"feeItems": [12.5, None], "byStatus": {"pending": 2}}
