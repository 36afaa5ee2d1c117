from __future__ import annotations

import dataclasses
from collections import Counter
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from university_erp.admission.model import AdmissionApplication, EligibilityCriteria
from university_erp.certification.model import Certificate, CertificateRequest
from university_erp.core.enums import (
    ACTIVE_APPLICATION_STATUSES,
    ApplicationStatus,
    ApprovalStatus,
    CertificateRequestStatus,
    FeePaymentStatus,
    JobApplicationStatus,
    JobPostingStatus,
    TransferStatus,
)
from university_erp.core.exceptions import ConflictError, RepositoryError
from university_erp.finance.model import Payment, StudentFee
from university_erp.hr.model import Employee, JobApplication, JobPosting, LeaveRequest
from university_erp.multicampus.model import Campus, StaffTransfer, StudentTransfer
from university_erp.payroll.model import SalaryProcessing, SalarySlip, SalaryStructure

CREATED = datetime(2026, 1, 5, 9, 0)


def _page(items, page):
    items = list(items)
    return items[page.offset : page.offset + page.limit], len(items)


def _matches(obj, **filters) -> bool:
    for name, value in filters.items():
        if value is not None and getattr(obj, name) != value:
            return False
    return True


class _Ids:
    def __init__(self):
        self._next = 0

    def __call__(self) -> int:
        self._next += 1
        return self._next


class FakeHRRepo:
    def __init__(self):
        self.employees: dict[int, Employee] = {}
        self.leaves: dict[int, LeaveRequest] = {}
        self.postings: dict[int, JobPosting] = {}
        self.applications: dict[int, JobApplication] = {}
        self._ids = _Ids()

    def list_employees(self, filters, page):
        rows = [
            e
            for e in self.employees.values()
            if _matches(
                e,
                department_id=filters.department_id,
                designation=filters.designation,
                employment_type=filters.employment_type,
                is_active=filters.is_active,
            )
        ]
        return _page(rows, page)

    def get_employee(self, employee_id):
        return self.employees.get(int(employee_id))

    def get_employee_by_code(self, employee_code):
        return next((e for e in self.employees.values() if e.employee_code == employee_code), None)

    def create_employee(self, data):
        eid = self._ids()
        self.employees[eid] = Employee(employee_id=eid, created_at=CREATED, **dataclasses.asdict(data))
        return eid

    def update_employee(self, employee_id, changes):
        self.employees[employee_id] = dataclasses.replace(self.employees[employee_id], **changes)
        return True

    def list_leave_requests(self, filters, page):
        rows = [
            r
            for r in self.leaves.values()
            if _matches(r, employee_id=filters.employee_id, status=filters.status, leave_type=filters.leave_type)
        ]
        return _page(rows, page)

    def get_leave_request(self, request_id):
        return self.leaves.get(int(request_id))

    def create_leave_request(self, data):
        rid = self._ids()
        self.leaves[rid] = LeaveRequest(request_id=rid, status=ApprovalStatus.PENDING, **dataclasses.asdict(data))
        return rid

    def save_leave_decision(self, decided, *, expected):
        if self.leaves[decided.request_id].status != expected:
            return False
        self.leaves[decided.request_id] = decided
        return True

    def approved_leave_days(self, employee_id):
        used: Counter = Counter()
        for r in self.leaves.values():
            if r.employee_id == employee_id and r.status == ApprovalStatus.APPROVED:
                used[r.leave_type.value] += r.number_of_days
        return dict(used)

    def list_job_postings(self, *, status, department_id, page):
        rows = [p for p in self.postings.values() if _matches(p, status=status, department_id=department_id)]
        return _page(rows, page)

    def get_job_posting(self, posting_id):
        return self.postings.get(int(posting_id))

    def create_job_posting(self, data, *, created_by):
        pid = self._ids()
        self.postings[pid] = JobPosting(posting_id=pid, created_by=created_by, **dataclasses.asdict(data))
        return pid

    def list_job_applications(self, *, posting_id, status, page):
        rows = [
            a
            for a in self.applications.values()
            if _matches(a, posting_id=posting_id) and (status is None or a.status.value == status)
        ]
        return _page(rows, page)

    def create_job_application(self, data):
        if any(
            a.posting_id == data.posting_id and a.applicant_cnic == data.applicant_cnic
            for a in self.applications.values()
        ):
            raise ConflictError("Duplicate value while trying to submit job application")
        aid = self._ids()
        self.applications[aid] = JobApplication(
            application_id=aid, status=JobApplicationStatus.SUBMITTED, **dataclasses.asdict(data)
        )
        return aid

    # helpers
    def add_posting(self, **overrides) -> JobPosting:
        pid = self._ids()
        values = dict(
            posting_id=pid,
            title="Lecturer",
            description="Teach",
            deadline=date(2999, 1, 1),
            status=JobPostingStatus.PUBLISHED,
        )
        values.update(overrides)
        self.postings[pid] = JobPosting(**values)
        return self.postings[pid]


class FakePayrollRepo:
    def __init__(self):
        self.structures: dict[int, SalaryStructure] = {}
        self.processings: dict[int, SalaryProcessing] = {}
        self.slips: dict[int, SalarySlip] = {}
        self.fail_slip_insert = False
        self._ids = _Ids()

    def list_structures(self, *, employee_id, is_active, page):
        rows = [s for s in self.structures.values() if _matches(s, employee_id=employee_id, is_active=is_active)]
        return _page(rows, page)

    def get_structure(self, structure_id):
        return self.structures.get(int(structure_id))

    def get_active_structure(self, employee_id):
        active = [s for s in self.structures.values() if s.employee_id == employee_id and s.is_active]
        return max(active, key=lambda s: s.effective_from, default=None)

    def create_structure(self, structure):
        for sid, s in list(self.structures.items()):
            if s.employee_id == structure.employee_id and s.is_active:
                self.structures[sid] = dataclasses.replace(s, is_active=False, effective_to=structure.effective_from)
        sid = self._ids()
        self.structures[sid] = dataclasses.replace(structure, structure_id=sid, is_active=True)
        return sid

    def update_structure(self, structure):
        self.structures[structure.structure_id] = structure
        return True

    def list_processings(self, *, employee_id, payroll_period, status, page):
        rows = [
            p
            for p in self.processings.values()
            if _matches(p, employee_id=employee_id, payroll_period=payroll_period, status=status)
        ]
        return _page(rows, page)

    def get_processing(self, processing_id):
        return self.processings.get(int(processing_id))

    def find_processing(self, *, employee_id, payroll_period):
        return next(
            (
                p
                for p in self.processings.values()
                if p.employee_id == employee_id and p.payroll_period == payroll_period
            ),
            None,
        )

    def create_processing(self, record):
        pid = self._ids()
        self.processings[pid] = dataclasses.replace(record, processing_id=pid)
        return pid

    def save_processing_status(self, record, *, expected):
        if self.processings[record.processing_id].status != expected:
            return False
        self.processings[record.processing_id] = record
        return True

    def approve_with_slip(self, record, slip, *, expected):
        if self.processings[record.processing_id].status != expected:
            return False
        if self.fail_slip_insert:
            raise ConflictError("Duplicate value while trying to approve salary")
        self.processings[record.processing_id] = record
        sid = self._ids()
        self.slips[sid] = SalarySlip(slip_id=sid, issued_at=CREATED, **dataclasses.asdict(slip))
        return True

    def processings_for_period(self, payroll_period):
        return [p for p in self.processings.values() if p.payroll_period == payroll_period]

    def paid_processings_between(self, *, employee_id, start_period, end_period):
        return [
            p
            for p in self.processings.values()
            if p.employee_id == employee_id and p.status.value == "paid" and start_period <= p.payroll_period <= end_period
        ]

    def list_slips(self, *, employee_id, limit):
        rows = sorted(
            (s for s in self.slips.values() if s.employee_id == employee_id),
            key=lambda s: s.payroll_period,
            reverse=True,
        )
        return rows[:limit]


class FakeCertificationRepo:
    def __init__(self):
        self.requests: dict[int, CertificateRequest] = {}
        self.certificates: dict[int, Certificate] = {}
        self.fail_lookups = False
        self._ids = _Ids()

    def list_requests(self, *, student_id, status, certificate_type, page):
        rows = [
            r
            for r in self.requests.values()
            if _matches(r, student_id=student_id, status=status, certificate_type=certificate_type)
        ]
        return _page(rows, page)

    def get_request(self, request_id):
        return self.requests.get(int(request_id))

    def create_request(self, data):
        rid = self._ids()
        self.requests[rid] = CertificateRequest(
            request_id=rid, status=CertificateRequestStatus.PENDING, **dataclasses.asdict(data)
        )
        return rid

    def save_request_status(self, updated, *, expected):
        if self.requests[updated.request_id].status != expected:
            return False
        self.requests[updated.request_id] = updated
        return True

    def mark_fee_paid(self, request_id):
        current = self.requests[request_id]
        if current.fee_paid:
            return False
        self.requests[request_id] = dataclasses.replace(current, fee_paid=True)
        return True

    def list_certificates(self, *, student_id, certificate_type, is_verified, page):
        rows = [
            c
            for c in self.certificates.values()
            if _matches(c, student_id=student_id, certificate_type=certificate_type, is_verified=is_verified)
        ]
        return _page(rows, page)

    def get_certificate(self, certificate_id):
        return self.certificates.get(int(certificate_id))

    def _lookup(self, **criteria):
        if self.fail_lookups:
            raise RepositoryError("Failed to fetch certificate") from ConnectionError("connection refused")
        return next((c for c in self.certificates.values() if _matches(c, **criteria)), None)

    def find_by_verification_code(self, verification_code):
        return self._lookup(verification_code=verification_code)

    def find_by_number(self, certificate_number):
        return self._lookup(certificate_number=certificate_number)

    def issue_certificate(self, data, processing):
        if any(
            c.certificate_number == data.certificate_number or c.verification_code == data.verification_code
            for c in self.certificates.values()
        ):
            raise ConflictError("Duplicate value while trying to issue certificate")
        if self.requests[processing.request_id].status != CertificateRequestStatus.APPROVED:
            return None
        self.requests[processing.request_id] = processing
        cid = self._ids()
        self.certificates[cid] = Certificate(certificate_id=cid, **dataclasses.asdict(data))
        return cid

    def mark_verified(self, certificate_id, *, verified_at):
        current = self.certificates[certificate_id]
        if current.is_verified:
            return False
        self.certificates[certificate_id] = dataclasses.replace(current, is_verified=True, verified_at=verified_at)
        return True

    def update_urls(self, certificate_id, *, qr_code_url, pdf_url):
        current = self.certificates[certificate_id]
        self.certificates[certificate_id] = dataclasses.replace(
            current, qr_code_url=qr_code_url or current.qr_code_url, pdf_url=pdf_url or current.pdf_url
        )
        return True


class FakeMultiCampusRepo:
    def __init__(self):
        self.campuses: dict[int, Campus] = {}
        self.student_transfers: dict[int, StudentTransfer] = {}
        self.staff_transfers: dict[int, StaffTransfer] = {}
        self.staff_counts: dict[int, int] = {}
        self._ids = _Ids()

    def list_campuses(self, *, city, is_active, page):
        return _page([c for c in self.campuses.values() if _matches(c, city=city, is_active=is_active)], page)

    def get_campus(self, campus_id):
        return self.campuses.get(int(campus_id))

    def get_campus_by_code(self, code):
        return next((c for c in self.campuses.values() if c.code == code), None)

    def create_campus(self, data):
        cid = self._ids()
        self.campuses[cid] = Campus(campus_id=cid, **dataclasses.asdict(data))
        return cid

    def update_campus(self, campus_id, changes):
        self.campuses[campus_id] = dataclasses.replace(self.campuses[campus_id], **changes)
        return True

    def _filter(self, store, subject, filters, page):
        rows = [
            t
            for t in store.values()
            if _matches(
                t,
                from_campus_id=filters.from_campus_id,
                to_campus_id=filters.to_campus_id,
                status=filters.status,
                **{subject: filters.subject_id},
            )
        ]
        return _page(rows, page)

    def _save(self, store, decided, expected):
        if store[decided.transfer_id].status != expected:
            return False
        store[decided.transfer_id] = decided
        return True

    def list_student_transfers(self, filters, page):
        return self._filter(self.student_transfers, "student_id", filters, page)

    def get_student_transfer(self, transfer_id):
        return self.student_transfers.get(int(transfer_id))

    def create_student_transfer(self, data):
        tid = self._ids()
        self.student_transfers[tid] = StudentTransfer(
            transfer_id=tid,
            student_id=data.subject_id,
            from_campus_id=data.from_campus_id,
            to_campus_id=data.to_campus_id,
            reason=data.reason,
            status=TransferStatus.PENDING,
            requested_date=data.requested_date,
        )
        return tid

    def save_student_transfer_decision(self, decided, *, expected):
        return self._save(self.student_transfers, decided, expected)

    def list_staff_transfers(self, filters, page):
        return self._filter(self.staff_transfers, "employee_id", filters, page)

    def get_staff_transfer(self, transfer_id):
        return self.staff_transfers.get(int(transfer_id))

    def create_staff_transfer(self, data):
        tid = self._ids()
        self.staff_transfers[tid] = StaffTransfer(
            transfer_id=tid,
            employee_id=data.subject_id,
            from_campus_id=data.from_campus_id,
            to_campus_id=data.to_campus_id,
            reason=data.reason,
            status=TransferStatus.PENDING,
            requested_date=data.requested_date,
        )
        return tid

    def save_staff_transfer_decision(self, decided, *, expected):
        return self._save(self.staff_transfers, decided, expected)

    def count_staff(self, campus_id):
        return self.staff_counts.get(campus_id, 0)

    def transfer_counts(self, campus_id):
        out = {}
        for label, store in (("student", self.student_transfers), ("staff", self.staff_transfers)):
            for direction, column in (("in", "to_campus_id"), ("out", "from_campus_id")):
                out[f"{label}_{direction}"] = dict(
                    Counter(t.status.value for t in store.values() if getattr(t, column) == campus_id)
                )
        return out

    # helpers
    def add_campus(self, code: str, *, is_active: bool = True) -> Campus:
        cid = self._ids()
        self.campuses[cid] = Campus(
            campus_id=cid,
            name=f"{code} Campus",
            code=code,
            address="Main Road",
            city="Lahore",
            province="Punjab",
            is_active=is_active,
        )
        return self.campuses[cid]


class FakeAdmissionRepo:
    def __init__(self):
        self.applications: dict[int, AdmissionApplication] = {}
        self.criteria: dict[int, EligibilityCriteria] = {}
        self.merit_lists: dict[int, dict] = {}
        self._ids = _Ids()

    def list_applications(self, *, program_id, user_id, batch, status, page):
        rows = [
            a
            for a in self.applications.values()
            if _matches(a, program_id=program_id, user_id=user_id, batch=batch, status=status)
        ]
        return _page(rows, page)

    def get_application(self, application_id):
        return self.applications.get(int(application_id))

    def find_active_application(self, *, user_id, program_id):
        return next(
            (
                a
                for a in self.applications.values()
                if a.user_id == user_id and a.program_id == program_id and a.status in ACTIVE_APPLICATION_STATUSES
            ),
            None,
        )

    def create_application(self, data):
        aid = self._ids()
        self.applications[aid] = AdmissionApplication(
            application_id=aid, status=ApplicationStatus.SUBMITTED, submitted_at=CREATED, **dataclasses.asdict(data)
        )
        return aid

    def save_application_status(self, updated, *, expected):
        if self.applications[updated.application_id].status != expected:
            return False
        self.applications[updated.application_id] = updated
        return True

    def get_criteria(self, program_id):
        return self.criteria.get(program_id)

    def eligible_applications(self, *, program_id, batch):
        return [
            a
            for a in self.applications.values()
            if a.program_id == program_id and a.batch == batch and a.status == ApplicationStatus.ELIGIBLE
        ]

    def save_merit_list(self, *, program_id, batch, total_seats, entries, actor_id):
        mid = self._ids()
        for entry in entries:
            current = self.applications[entry.application_id]
            self.applications[entry.application_id] = dataclasses.replace(
                current, status=entry.status, merit_rank=entry.rank, reviewed_by=actor_id
            )
        self.merit_lists[mid] = {"program_id": program_id, "batch": batch, "entries": list(entries)}
        return mid

    # helpers
    def add_application(self, *, program_id=1, batch="2026", status=ApplicationStatus.ELIGIBLE, score=None, name=None):
        aid = self._ids()
        self.applications[aid] = AdmissionApplication(
            application_id=aid,
            application_number=f"APP-2026-{aid:05d}",
            user_id=100 + aid,
            program_id=program_id,
            batch=batch,
            status=status,
            applicant_name=name,
            eligibility_score=Decimal(str(score)) if score is not None else None,
        )
        return self.applications[aid]


class FakeFinanceRepo:
    def __init__(self):
        self.fees: dict[int, StudentFee] = {}
        self.payments: dict[int, Payment] = {}
        self.concurrent_payment: Optional[Decimal] = None
        self._ids = _Ids()

    def list_student_fees(self, filters, page):
        rows = [
            f
            for f in self.fees.values()
            if _matches(f, student_id=filters.student_id, semester=filters.semester, payment_status=filters.payment_status)
        ]
        return _page(rows, page)

    def get_student_fee(self, student_fee_id):
        return self.fees.get(int(student_fee_id))

    def fees_for_student(self, student_id, *, semester):
        return [f for f in self.fees.values() if _matches(f, student_id=student_id, semester=semester)]

    def list_payments(self, filters, page):
        rows = [
            p
            for p in self.payments.values()
            if _matches(
                p,
                student_id=filters.student_id,
                student_fee_id=filters.student_fee_id,
                payment_method=filters.payment_method,
            )
        ]
        return _page(rows, page)

    def payments_for_student(self, student_id):
        return [p for p in self.payments.values() if p.student_id == student_id]

    def get_payment(self, payment_id):
        return self.payments.get(int(payment_id))

    def record_payment(self, payment, settlement):
        fee = self.fees[settlement.student_fee_id]
        if self.concurrent_payment is not None:
            fee = dataclasses.replace(fee, amount_paid=fee.amount_paid + self.concurrent_payment)
            self.fees[fee.student_fee_id] = fee
        if fee.amount_paid != settlement.previous_paid:
            return None
        self.fees[fee.student_fee_id] = dataclasses.replace(
            fee, amount_paid=settlement.amount_paid, payment_status=settlement.payment_status
        )
        pid = self._ids()
        self.payments[pid] = Payment(payment_id=pid, **dataclasses.asdict(payment))
        return pid

    # helpers
    def add_fee(self, *, student_id=1, semester="Fall-2026", due="50000", paid="0", due_date=date(2999, 1, 1), status=FeePaymentStatus.PENDING):
        fid = self._ids()
        self.fees[fid] = StudentFee(
            student_fee_id=fid,
            student_id=student_id,
            semester=semester,
            amount_due=Decimal(due),
            amount_paid=Decimal(paid),
            due_date=due_date,
            payment_status=status,
        )
        return self.fees[fid]


@pytest.fixture
def hr_repo():
    return FakeHRRepo()


@pytest.fixture
def payroll_repo():
    return FakePayrollRepo()


@pytest.fixture
def certification_repo():
    return FakeCertificationRepo()


@pytest.fixture
def multicampus_repo():
    return FakeMultiCampusRepo()


@pytest.fixture
def admission_repo():
    return FakeAdmissionRepo()


@pytest.fixture
def finance_repo():
    return FakeFinanceRepo()
