from __future__ import annotations

from decimal import Decimal

import pytest

from university_erp.admission.merit import rank_merit_list
from university_erp.admission.model import AdmissionApplication
from university_erp.core.enums import ApplicationStatus
from university_erp.core.exceptions import ValidationError


def _app(app_id: int, score) -> AdmissionApplication:
    return AdmissionApplication(
        application_id=app_id,
        application_number=f"APP-2026-{app_id:05d}",
        user_id=app_id,
        program_id=1,
        batch="2026",
        status=ApplicationStatus.ELIGIBLE,
        eligibility_score=Decimal(str(score)) if score is not None else None,
    )


@pytest.mark.parametrize("count,seats", [(5, 2), (3, 3), (2, 10), (4, 0), (0, 3)])
def test_selects_first_seats_and_ranks_contiguously(count, seats):
    entries = rank_merit_list([_app(i, 50 + i) for i in range(1, count + 1)], seats)

    assert [e.rank for e in entries] == list(range(1, count + 1))
    selected = [e for e in entries if e.status is ApplicationStatus.SELECTED]
    assert len(selected) == min(count, seats)
    assert all(e.status is ApplicationStatus.WAITLISTED for e in entries[len(selected) :])


def test_highest_score_first():
    entries = rank_merit_list([_app(1, "61.5"), _app(2, "88"), _app(3, "74.25")], 2)

    assert [e.application_id for e in entries] == [2, 3, 1]
    assert entries[0].merit_score == Decimal("88")


def test_ties_keep_submission_order():
    entries = rank_merit_list([_app(1, 70), _app(2, 90), _app(3, 70), _app(4, 70)], 2)

    assert [e.application_id for e in entries] == [2, 1, 3, 4]
    assert entries[1].status is ApplicationStatus.SELECTED
    assert entries[2].status is ApplicationStatus.WAITLISTED


def test_missing_score_ranks_last():
    entries = rank_merit_list([_app(1, None), _app(2, 10)], 1)

    assert [e.application_id for e in entries] == [2, 1]
    assert entries[1].merit_score == Decimal("0")


def test_negative_seats_rejected():
    with pytest.raises(ValidationError):
        rank_merit_list([_app(1, 60)], -1)
