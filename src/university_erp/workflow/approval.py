"""Approval state machine shared by leave requests, transfers, certificate
requests and salary processing.

Entities are frozen dataclasses exposing ``status``, ``approved_by``,
``approved_at``, ``rejection_reason`` and ``remarks``. Transitions never
mutate: they return a copy carrying the new status and the audit fields, which
the repository then persists with a conditional update on the old status.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from ..common.datetime_utils import now_local
from ..common.validators import optional_date, optional_text
from ..core.enums import DECISION_STATUSES, ApprovalStatus
from ..core.exceptions import InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Guard = Callable[[Any, Any], None]

_DECISION_VALUES = frozenset(s.value for s in DECISION_STATUSES)
_PENDING = (ApprovalStatus.PENDING,)


def status_value(status: Any) -> str:
    return getattr(status, "value", status)


@dataclass(frozen=True)
class DecisionInput:
    """Body of an approve/reject call."""

    status: str
    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None
    effective_date: Optional[date] = None
    transfer_date: Optional[date] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "DecisionInput":
        status = str(payload.get("status") or "").strip().lower()
        if status not in _DECISION_VALUES:
            raise ValidationError("Status must be either approved or rejected")
        return cls(
            status=status,
            remarks=optional_text(payload.get("remarks")),
            rejection_reason=optional_text(payload.get("rejectionReason")),
            effective_date=optional_date(payload.get("effectiveDate"), "Effective date"),
            transfer_date=optional_date(payload.get("transferDate"), "Transfer date"),
        )

    @property
    def approving(self) -> bool:
        return self.status == ApprovalStatus.APPROVED.value


def ensure_status(entity: Any, allowed_from: Iterable[Any], *, subject: str, action: str) -> None:
    allowed = [status_value(s) for s in allowed_from]
    if status_value(entity.status) not in allowed:
        names = " or ".join(allowed)
        raise InvalidTransitionError(f"Only {names} {subject} can be {action}")


def decide(
    entity: T,
    *,
    to: Any,
    actor_id: int,
    subject: str = "requests",
    allowed_from: Sequence[Any] = _PENDING,
    guards: Sequence[Guard] = (),
    rejection_reason: Optional[str] = None,
    remarks: Optional[str] = None,
    require_rejection_reason: bool = False,
    at: Optional[datetime] = None,
) -> T:
    """Move ``entity`` to approved/rejected and stamp the approver.

    Raises InvalidTransitionError when the current status is not in
    ``allowed_from``; guards run after the status check and may raise
    ValidationError to block the decision.
    """
    target = status_value(to)
    if target not in _DECISION_VALUES:
        raise ValidationError("Status must be either approved or rejected")
    if not actor_id:
        raise ValidationError("Approver is required")

    ensure_status(entity, allowed_from, subject=subject, action="approved or rejected")
    for guard in guards:
        guard(entity, to)

    rejecting = target == ApprovalStatus.REJECTED.value
    reason = optional_text(rejection_reason) if rejecting else None
    if rejecting and require_rejection_reason and not reason:
        raise ValidationError("Rejection reason is required when rejecting")

    new_status = type(entity.status)(target)
    logger.info("%s %s -> %s by %s", type(entity).__name__, status_value(entity.status), target, actor_id)
    return dataclasses.replace(
        entity,
        status=new_status,
        approved_by=int(actor_id),
        approved_at=at or now_local(),
        rejection_reason=reason,
        remarks=optional_text(remarks) if remarks is not None else entity.remarks,
    )


def advance(entity: T, *, to: Any, allowed_from: Sequence[Any], subject: str, **changes: Any) -> T:
    """Linear lifecycle step (e.g. processed -> approved -> paid)."""
    target = type(entity.status)(status_value(to))
    ensure_status(entity, allowed_from, subject=subject, action=f"marked as {target.value}")
    logger.info("%s %s -> %s", type(entity).__name__, status_value(entity.status), target.value)
    return dataclasses.replace(entity, status=target, **changes)
