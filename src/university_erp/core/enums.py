from __future__ import annotations

from enum import Enum


class ApprovalStatus(str, Enum):
    """Statuses shared by every request that goes through an approval decision."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


DECISION_STATUSES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"
    EMERGENCY = "emergency"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    UNPAID = "unpaid"


class EmploymentType(str, Enum):
    PERMANENT = "permanent"
    CONTRACT = "contract"
    VISITING = "visiting"


class JobPostingStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class JobApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


class SalaryStatus(str, Enum):
    """Salary lifecycle: pending -> processed -> approved -> paid."""

    PENDING = "pending"
    PROCESSED = "processed"
    APPROVED = "approved"
    PAID = "paid"


class CertificateRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PROCESSING = "processing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CertificateType(str, Enum):
    DEGREE = "degree"
    TRANSCRIPT = "transcript"
    CHARACTER = "character"
    BONAFIDE = "bonafide"
    COURSE_COMPLETION = "course_completion"
    ATTENDANCE = "attendance"
    OTHER = "other"


class DeliveryMethod(str, Enum):
    PICKUP = "pickup"
    EMAIL = "email"
    POSTAL = "postal"


class TransferStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    SELECTED = "selected"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"
    ENROLLED = "enrolled"


ACTIVE_APPLICATION_STATUSES = frozenset(
    {
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.ELIGIBLE,
        ApplicationStatus.SELECTED,
        ApplicationStatus.WAITLISTED,
    }
)


class FeePaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    WAIVED = "waived"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"
    ONLINE = "online"
    CHEQUE = "cheque"
