from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pytest

from university_erp.core.enums import ApprovalStatus, SalaryStatus
from university_erp.core.exceptions import InvalidTransitionError, ValidationError
from university_erp.workflow.approval import DecisionInput, advance, decide


@dataclass(frozen=True)
class Ticket:
    ticket_id: int
    status: ApprovalStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class Run:
    status: SalaryStatus
    approved_by: Optional[int] = None


STAMP = datetime(2026, 3, 1, 9, 30)


def test_approve_pending_stamps_approver():
    out = decide(Ticket(1, ApprovalStatus.PENDING), to="approved", actor_id=7, remarks="ok", at=STAMP)

    assert out.status is ApprovalStatus.APPROVED
    assert out.approved_by == 7
    assert out.approved_at == STAMP
    assert out.rejection_reason is None
    assert out.remarks == "ok"


def test_reject_records_reason():
    out = decide(
        Ticket(1, ApprovalStatus.PENDING),
        to=ApprovalStatus.REJECTED,
        actor_id=3,
        rejection_reason="  missing documents ",
    )

    assert out.status is ApprovalStatus.REJECTED
    assert out.approved_by == 3
    assert out.approved_at is not None
    assert out.rejection_reason == "missing documents"


def test_approve_drops_rejection_reason():
    out = decide(Ticket(1, ApprovalStatus.PENDING), to="approved", actor_id=3, rejection_reason="ignored")
    assert out.rejection_reason is None


def test_original_entity_is_not_mutated():
    original = Ticket(1, ApprovalStatus.PENDING)
    decide(original, to="approved", actor_id=1)
    assert original.status is ApprovalStatus.PENDING
    assert original.approved_by is None


@pytest.mark.parametrize("status", [ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.CANCELLED])
def test_decision_only_from_pending(status):
    with pytest.raises(ValidationError) as exc:
        decide(Ticket(1, status), to="approved", actor_id=1)
    assert isinstance(exc.value, InvalidTransitionError)


def test_unknown_target_status_rejected():
    with pytest.raises(ValidationError):
        decide(Ticket(1, ApprovalStatus.PENDING), to="cancelled", actor_id=1)


def test_actor_is_required():
    with pytest.raises(ValidationError):
        decide(Ticket(1, ApprovalStatus.PENDING), to="approved", actor_id=0)


def test_rejection_reason_can_be_mandatory():
    with pytest.raises(ValidationError):
        decide(Ticket(1, ApprovalStatus.PENDING), to="rejected", actor_id=1, require_rejection_reason=True)


def test_guards_run_after_status_check():
    calls = []

    def guard(entity, to):
        calls.append(to)
        raise ValidationError("blocked")

    with pytest.raises(InvalidTransitionError):
        decide(Ticket(1, ApprovalStatus.APPROVED), to="approved", actor_id=1, guards=(guard,))
    assert calls == []

    with pytest.raises(ValidationError, match="blocked"):
        decide(Ticket(1, ApprovalStatus.PENDING), to="approved", actor_id=1, guards=(guard,))
    assert calls == ["approved"]


def test_remarks_kept_when_not_given():
    out = decide(Ticket(1, ApprovalStatus.PENDING, remarks="earlier"), to="approved", actor_id=1)
    assert out.remarks == "earlier"


def test_advance_follows_lifecycle():
    run = Run(SalaryStatus.PROCESSED)
    approved = advance(run, to="approved", allowed_from=(SalaryStatus.PROCESSED,), subject="salaries", approved_by=5)

    assert approved.status is SalaryStatus.APPROVED
    assert approved.approved_by == 5

    with pytest.raises(InvalidTransitionError, match="Only approved salaries can be marked as paid"):
        advance(run, to=SalaryStatus.PAID, allowed_from=(SalaryStatus.APPROVED,), subject="salaries")


def test_decision_input_from_payload():
    decision = DecisionInput.from_payload(
        {"status": " Approved ", "remarks": "fine", "rejectionReason": "", "effectiveDate": "2026-05-01"}
    )

    assert decision.status == "approved"
    assert decision.approving
    assert decision.remarks == "fine"
    assert decision.rejection_reason is None
    assert decision.effective_date == date(2026, 5, 1)


@pytest.mark.parametrize("payload", [{}, {"status": "pending"}, {"status": "paid"}])
def test_decision_input_requires_decision_status(payload):
    with pytest.raises(ValidationError):
        DecisionInput.from_payload(payload)


def test_decision_input_rejects_bad_effective_date():
    with pytest.raises(ValidationError):
        DecisionInput.from_payload({"status": "approved", "effectiveDate": "01/05/2026"})
