from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..core.enums import ApplicationStatus
from ..core.exceptions import ValidationError
from .model import AdmissionApplication, MeritEntry


def rank_merit_list(applications: Iterable[AdmissionApplication], total_seats: int) -> list[MeritEntry]:
    """Rank by eligibility score, highest first.

    Ranks run 1..N with no gaps. The first ``total_seats`` are selected and the
    rest waitlisted. Equal scores keep their input order (``sorted`` is stable).
    """
    if total_seats < 0:
        raise ValidationError("Total seats cannot be negative")

    ordered = sorted(applications, key=lambda a: a.eligibility_score or Decimal("0"), reverse=True)
    return [
        MeritEntry(
            application_id=app.application_id,
            application_number=app.application_number,
            applicant_name=app.applicant_name,
            merit_score=app.eligibility_score or Decimal("0"),
            rank=position,
            status=ApplicationStatus.SELECTED if position <= total_seats else ApplicationStatus.WAITLISTED,
        )
        for position, app in enumerate(ordered, start=1)
    ]
