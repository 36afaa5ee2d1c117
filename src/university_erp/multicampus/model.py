from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import TransferStatus


@dataclass(frozen=True)
class Campus:
    campus_id: int
    name: str
    code: str
    address: str
    city: str
    province: str
    phone: Optional[str] = None
    email: Optional[str] = None
    established_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewCampus:
    name: str
    code: str
    address: str
    city: str
    province: str
    phone: Optional[str] = None
    email: Optional[str] = None
    established_date: Optional[date] = None


@dataclass(frozen=True)
class StudentTransfer:
    transfer_id: int
    student_id: int
    from_campus_id: int
    to_campus_id: int
    reason: str
    status: TransferStatus
    requested_date: date
    effective_date: Optional[date] = None
    transfer_date: Optional[date] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StaffTransfer:
    transfer_id: int
    employee_id: int
    from_campus_id: int
    to_campus_id: int
    reason: str
    status: TransferStatus
    requested_date: date
    effective_date: Optional[date] = None
    transfer_date: Optional[date] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewTransfer:
    subject_id: int
    from_campus_id: int
    to_campus_id: int
    reason: str
    requested_date: date


@dataclass(frozen=True)
class TransferFilters:
    subject_id: Optional[int] = None
    from_campus_id: Optional[int] = None
    to_campus_id: Optional[int] = None
    status: Optional[TransferStatus] = None


@dataclass(frozen=True)
class CampusReport:
    campus_id: int
    campus_name: str
    report_date: date
    total_staff: int
    student_transfers_in: dict[str, int] = field(default_factory=dict)
    student_transfers_out: dict[str, int] = field(default_factory=dict)
    staff_transfers_in: dict[str, int] = field(default_factory=dict)
    staff_transfers_out: dict[str, int] = field(default_factory=dict)


CAMPUS_UPDATABLE = frozenset({"name", "code", "address", "city", "province", "phone", "email", "is_active"})
