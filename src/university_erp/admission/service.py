from __future__ import annotations

import logging
import secrets
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from ..common.datetime_utils import now_local, today_local
from ..common.pagination import Page, Pagination
from ..common.validators import optional_text, parse_amount, require_enum, require_id, require_non_empty
from ..core.constants import CGPA_TO_MARKS_FACTOR, ELIGIBILITY_BASE_SCORE, ENTRY_TEST_WEIGHT, INTERVIEW_WEIGHT
from ..core.enums import ApplicationStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..workflow.approval import advance
from .merit import rank_merit_list
from .model import AdmissionApplication, EligibilityResult, MeritList, NewApplication
from .repository import AdmissionRepository

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

# Statuses a reviewer may set directly, with the statuses they may come from.
# eligible/not_eligible and selected/waitlisted are set by the eligibility
# check and the merit list.
REVIEW_TRANSITIONS = {
    ApplicationStatus.UNDER_REVIEW: (ApplicationStatus.SUBMITTED,),
    ApplicationStatus.REJECTED: (
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.ELIGIBLE,
        ApplicationStatus.NOT_ELIGIBLE,
        ApplicationStatus.WAITLISTED,
    ),
    ApplicationStatus.ENROLLED: (ApplicationStatus.SELECTED,),
}

ELIGIBILITY_CHECK_FROM = (
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.ELIGIBLE,
    ApplicationStatus.NOT_ELIGIBLE,
)


def generate_application_number(year: int) -> str:
    return f"APP-{year}-{secrets.randbelow(100000):05d}"


def _percentage(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    pct = parse_amount(value, field_name)
    if pct < 0 or pct > HUNDRED:
        raise ValidationError(f"{field_name} must be between 0 and 100")
    return pct


class AdmissionService:
    def __init__(self, repo: AdmissionRepository):
        self._repo = repo

    def list_applications(
        self,
        *,
        program_id: Optional[int] = None,
        user_id: Optional[int] = None,
        batch: Optional[str] = None,
        status: Any = None,
        page: Pagination,
    ) -> Page[AdmissionApplication]:
        items, total = self._repo.list_applications(
            program_id=program_id,
            user_id=user_id,
            batch=optional_text(batch),
            status=require_enum(status, ApplicationStatus, "Status") if status else None,
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def get_application(self, application_id: int) -> AdmissionApplication:
        application = self._repo.get_application(int(application_id))
        if not application:
            raise NotFoundError("Application")
        return application

    def submit_application(
        self, *, user_id: Any, program_id: Any, batch: Any, applicant_name: Optional[str] = None
    ) -> AdmissionApplication:
        uid = require_id(user_id, "User ID")
        pid = require_id(program_id, "Program ID")
        if self._repo.find_active_application(user_id=uid, program_id=pid):
            raise ConflictError("You already have an active application for this program")

        application_id = self._repo.create_application(
            NewApplication(
                application_number=generate_application_number(today_local().year),
                user_id=uid,
                program_id=pid,
                batch=require_non_empty(batch, "Batch"),
                applicant_name=optional_text(applicant_name),
            )
        )
        logger.info("Application %s submitted by user %s for program %s", application_id, uid, pid)
        return self.get_application(application_id)

    def update_application_status(self, *, application_id: int, status: Any, actor_id: int) -> AdmissionApplication:
        target = require_enum(status, ApplicationStatus, "Status")
        if target not in REVIEW_TRANSITIONS:
            raise ValidationError(f"Status {target.value} cannot be set directly")
        current = self.get_application(application_id)
        updated = advance(
            current,
            to=target,
            allowed_from=REVIEW_TRANSITIONS[target],
            subject="applications",
            reviewed_by=int(actor_id),
            reviewed_at=now_local(),
        )
        if not self._repo.save_application_status(updated, expected=current.status):
            raise ConflictError("Application was updated by another user")
        return updated

    def check_eligibility(
        self,
        *,
        application_id: Any,
        marks: Any = None,
        cgpa: Any = None,
        entry_test: Any = None,
        interview: Any = None,
        qualification_year: Any = None,
    ) -> EligibilityResult:
        """Score an application against its program's criteria.

        50 points for meeting the minimum marks, plus the entry test at 30% and
        the interview at 20% of their percentages. Marks default to CGPA x 25.
        """
        application = self.get_application(require_id(application_id, "Application ID"))
        criteria = self._repo.get_criteria(application.program_id)
        if not criteria:
            return EligibilityResult(
                application_id=application.application_id,
                eligible=False,
                score=Decimal("0"),
                reasons=["Eligibility criteria not found for this program"],
            )

        grade = parse_amount(cgpa, "CGPA") if cgpa not in (None, "") else None
        pct = _percentage(marks, "Marks")
        if pct is None:
            pct = grade * CGPA_TO_MARKS_FACTOR if grade is not None else Decimal("0")

        score = Decimal("0")
        reasons: list[str] = []
        if criteria.minimum_marks is not None and pct < criteria.minimum_marks:
            reasons.append(f"Marks {pct}% is below minimum required {criteria.minimum_marks}%")
        else:
            score += ELIGIBILITY_BASE_SCORE

        if criteria.minimum_cgpa is not None and grade is not None and grade < criteria.minimum_cgpa:
            reasons.append(f"CGPA {grade} is below minimum required {criteria.minimum_cgpa}")

        if criteria.age_limit and qualification_year not in (None, ""):
            try:
                years = today_local().year - int(qualification_year)
            except (TypeError, ValueError):
                raise ValidationError("Qualification year must be a number")
            if years > criteria.age_limit:
                reasons.append(f"Age exceeds maximum limit of {criteria.age_limit} years")

        test = _percentage(entry_test, "Entry test score")
        if test is not None:
            score += test * ENTRY_TEST_WEIGHT
        talk = _percentage(interview, "Interview score")
        if talk is not None:
            score += talk * INTERVIEW_WEIGHT

        score = score.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        eligible = not reasons
        updated = advance(
            application,
            to=ApplicationStatus.ELIGIBLE if eligible else ApplicationStatus.NOT_ELIGIBLE,
            allowed_from=ELIGIBILITY_CHECK_FROM,
            subject="applications",
            eligibility_score=score,
        )
        if not self._repo.save_application_status(updated, expected=application.status):
            raise ConflictError("Application was updated by another user")

        return EligibilityResult(
            application_id=application.application_id,
            eligible=eligible,
            score=score,
            reasons=reasons,
            criteria=criteria,
        )

    def generate_merit_list(
        self, *, program_id: Any, batch: Any, total_seats: Any, actor_id: Optional[int] = None
    ) -> MeritList:
        pid = require_id(program_id, "Program ID")
        cohort = require_non_empty(batch, "Batch")
        try:
            seats = int(total_seats)
        except (TypeError, ValueError):
            raise ValidationError("Total seats must be a number")
        if seats < 1:
            raise ValidationError("Total seats must be at least 1")

        entries = rank_merit_list(self._repo.eligible_applications(program_id=pid, batch=cohort), seats)
        merit_list_id = self._repo.save_merit_list(
            program_id=pid, batch=cohort, total_seats=seats, entries=entries, actor_id=actor_id
        )
        logger.info(
            "Merit list %s for program %s batch %s: %d ranked, %d seats", merit_list_id, pid, cohort, len(entries), seats
        )
        return MeritList(
            merit_list_id=merit_list_id,
            program_id=pid,
            batch=cohort,
            total_seats=seats,
            published_date=today_local(),
            entries=entries,
        )
