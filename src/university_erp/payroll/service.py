from __future__ import annotations

import dataclasses
import logging
import re
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import days_in_period, now_local, today_local
from ..common.pagination import Page, Pagination
from ..common.validators import (
    optional_date,
    require_date,
    require_enum,
    require_id,
    require_non_negative,
    require_payroll_period,
    require_positive,
)
from ..core.constants import DEFAULT_SALARY_SLIP_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import SalaryStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..workflow.approval import DecisionInput, advance, decide, ensure_status
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import (
    STRUCTURE_AMOUNT_FIELDS,
    ZERO,
    NewSalarySlip,
    PayrollSummary,
    SalaryProcessing,
    SalarySlip,
    SalaryStructure,
    TaxCalculation,
)
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

TAX_YEAR_PATTERN = re.compile(r"^\d{4}$")
_PROCESSED = (SalaryStatus.PROCESSED,)


class PayrollService:
    def __init__(self, repo: PayrollRepository, *, calculator: Optional[PayrollCalculator] = None):
        self._repo = repo
        self._calculator = calculator or StandardPayrollCalculator()

    # -------- Salary structures --------
    def list_structures(
        self, *, employee_id: Optional[int] = None, is_active: Optional[bool] = None, page: Pagination
    ) -> Page[SalaryStructure]:
        items, total = self._repo.list_structures(employee_id=employee_id, is_active=is_active, page=page)
        return Page(items=items, total=total, pagination=page)

    def get_structure(self, structure_id: int) -> SalaryStructure:
        structure = self._repo.get_structure(int(structure_id))
        if not structure:
            raise NotFoundError("Salary structure")
        return structure

    def get_active_structure(self, employee_id: int) -> SalaryStructure:
        structure = self._repo.get_active_structure(int(employee_id))
        if not structure:
            raise NotFoundError("Active salary structure")
        return structure

    def _with_totals(self, structure: SalaryStructure) -> SalaryStructure:
        return dataclasses.replace(
            structure,
            gross_salary=self._calculator.gross(structure),
            net_salary=self._calculator.net(structure),
        )

    @staticmethod
    def _amounts(values: dict, *, partial: bool) -> dict[str, Decimal]:
        out: dict[str, Decimal] = {}
        for name in STRUCTURE_AMOUNT_FIELDS:
            if partial and name not in values:
                continue
            label = name.replace("_", " ").capitalize()
            if name == "basic_salary":
                out[name] = require_positive(values.get(name), label)
            else:
                out[name] = require_non_negative(values.get(name), label)
        return out

    def create_structure(self, *, employee_id: Any, effective_from: Any, effective_to: Any = None, **amounts: Any) -> SalaryStructure:
        start = require_date(effective_from, "Effective from")
        end = optional_date(effective_to, "Effective to")
        if end and end < start:
            raise ValidationError("Effective to must be on or after effective from")

        draft = self._with_totals(
            SalaryStructure(
                structure_id=0,
                employee_id=require_id(employee_id, "Employee ID"),
                effective_from=start,
                effective_to=end,
                **self._amounts(amounts, partial=False),
            )
        )
        if draft.net_salary < 0:
            raise ValidationError("Deductions cannot exceed gross salary")

        structure_id = self._repo.create_structure(draft)
        logger.info("Created salary structure %s for employee %s", structure_id, draft.employee_id)
        return self.get_structure(structure_id)

    def update_structure(self, structure_id: int, changes: dict) -> SalaryStructure:
        current = self.get_structure(structure_id)
        updates: dict[str, Any] = self._amounts(changes, partial=True)
        if "effective_to" in changes:
            updates["effective_to"] = optional_date(changes["effective_to"], "Effective to")
        if "is_active" in changes:
            updates["is_active"] = bool(changes["is_active"])
        if not updates:
            raise ValidationError("No valid fields to update")

        updated = self._with_totals(dataclasses.replace(current, **updates))
        if updated.net_salary < 0:
            raise ValidationError("Deductions cannot exceed gross salary")
        self._repo.update_structure(updated)
        return self.get_structure(structure_id)

    # -------- Salary processing --------
    def list_processings(
        self,
        *,
        employee_id: Optional[int] = None,
        payroll_period: Optional[str] = None,
        status: Any = None,
        page: Pagination,
    ) -> Page[SalaryProcessing]:
        items, total = self._repo.list_processings(
            employee_id=employee_id,
            payroll_period=require_payroll_period(payroll_period) if payroll_period else None,
            status=require_enum(status, SalaryStatus, "Status") if status else None,
            page=page,
        )
        return Page(items=items, total=total, pagination=page)

    def get_processing(self, processing_id: int) -> SalaryProcessing:
        record = self._repo.get_processing(int(processing_id))
        if not record:
            raise NotFoundError("Salary processing")
        return record

    def process_salary(
        self,
        *,
        employee_id: Any,
        payroll_period: Any,
        days_worked: Any = None,
        bonus: Any = None,
        advance_deduction: Any = None,
        actor_id: Optional[int] = None,
    ) -> SalaryProcessing:
        emp_id = require_id(employee_id, "Employee ID")
        period = require_payroll_period(payroll_period)

        if self._repo.find_processing(employee_id=emp_id, payroll_period=period):
            raise ConflictError("Salary already processed for this period")
        structure = self.get_active_structure(emp_id)

        month_days = days_in_period(period)
        if days_worked in (None, ""):
            worked = month_days
        else:
            try:
                worked = int(days_worked)
            except (TypeError, ValueError):
                raise ValidationError("Days worked must be a number")
            if worked < 0 or worked > month_days:
                raise ValidationError(f"Days worked must be between 0 and {month_days}")

        b = self._calculator.breakdown(
            structure,
            days_worked=worked,
            days_in_month=month_days,
            bonus=require_non_negative(bonus, "Bonus"),
            advance_deduction=require_non_negative(advance_deduction, "Advance deduction"),
        )
        record = SalaryProcessing(
            processing_id=0,
            employee_id=emp_id,
            payroll_period=period,
            basic_salary=b.basic_salary,
            allowances=b.allowances,
            bonus=b.bonus,
            gross_salary=b.gross_salary,
            provident_fund=b.provident_fund,
            tax_amount=b.tax_amount,
            advance_deduction=b.advance_deduction,
            other_deductions=b.other_deductions,
            deductions=b.total_deductions,
            net_salary=b.net_salary,
            days_worked=worked,
            days_in_month=month_days,
            status=SalaryStatus.PENDING,
        )
        if actor_id:
            record = advance(
                record,
                to=SalaryStatus.PROCESSED,
                allowed_from=(SalaryStatus.PENDING,),
                subject="salaries",
                processed_by=int(actor_id),
                processed_at=now_local(),
            )

        processing_id = self._repo.create_processing(record)
        logger.info("Processed salary %s for employee %s period %s", processing_id, emp_id, period)
        return self.get_processing(processing_id)

    def mark_salary_processed(self, *, processing_id: int, actor_id: int, remarks: Any = None) -> SalaryProcessing:
        """Move a pending salary (new or sent back on rejection) to processed."""
        if not actor_id:
            raise ValidationError("Processor is required")
        current = self.get_processing(processing_id)
        processed = advance(
            current,
            to=SalaryStatus.PROCESSED,
            allowed_from=(SalaryStatus.PENDING,),
            subject="salaries",
            processed_by=int(actor_id),
            processed_at=now_local(),
            remarks=remarks if remarks is not None else current.remarks,
        )
        if not self._repo.save_processing_status(processed, expected=SalaryStatus.PENDING):
            raise ConflictError("Salary was already processed by another user")
        logger.info("Salary %s marked processed by %s", processing_id, actor_id)
        return self.get_processing(processing_id)

    def decide_salary(self, *, processing_id: int, decision: DecisionInput, actor_id: int) -> SalaryProcessing:
        """Approve a processed salary (issuing its slip) or send it back to pending."""
        current = self.get_processing(processing_id)

        if decision.approving:
            decided = decide(
                current,
                to=SalaryStatus.APPROVED,
                actor_id=actor_id,
                subject="salaries",
                allowed_from=_PROCESSED,
                remarks=decision.remarks,
            )
            slip = NewSalarySlip(
                processing_id=current.processing_id,
                employee_id=current.employee_id,
                payroll_period=current.payroll_period,
                slip_number=f"SLIP-{current.payroll_period}-{current.employee_id}",
                gross_salary=current.gross_salary,
                total_deductions=current.deductions,
                net_salary=current.net_salary,
            )
            saved = self._repo.approve_with_slip(decided, slip, expected=SalaryStatus.PROCESSED)
        else:
            ensure_status(current, _PROCESSED, subject="salaries", action="approved or rejected")
            decided = advance(
                current,
                to=SalaryStatus.PENDING,
                allowed_from=_PROCESSED,
                subject="salaries",
                processed_by=None,
                processed_at=None,
                remarks=decision.remarks if decision.remarks is not None else current.remarks,
            )
            saved = self._repo.save_processing_status(decided, expected=SalaryStatus.PROCESSED)

        if not saved:
            raise ConflictError("Salary was already processed by another user")
        return self.get_processing(processing_id)

    def mark_salary_paid(self, *, processing_id: int, payment_date: Any = None) -> SalaryProcessing:
        current = self.get_processing(processing_id)
        paid_on = optional_date(payment_date, "Payment date") or today_local()
        paid = advance(
            current,
            to=SalaryStatus.PAID,
            allowed_from=(SalaryStatus.APPROVED,),
            subject="salaries",
            payment_date=paid_on,
        )
        if not self._repo.save_processing_status(paid, expected=SalaryStatus.APPROVED):
            raise ConflictError("Salary was already processed by another user")
        return self.get_processing(processing_id)

    # -------- Slips, tax, summary --------
    def list_salary_slips(self, *, employee_id: int, limit: Any = None) -> list[SalarySlip]:
        try:
            count = int(limit) if limit not in (None, "") else DEFAULT_SALARY_SLIP_LIMIT
        except (TypeError, ValueError):
            count = DEFAULT_SALARY_SLIP_LIMIT
        count = min(max(count, 1), MAX_PAGE_LIMIT)
        return list(self._repo.list_slips(employee_id=int(employee_id), limit=count))

    def calculate_tax(self, *, employee_id: int, tax_year: Any) -> TaxCalculation:
        year = str(tax_year or "").strip()
        if not TAX_YEAR_PATTERN.match(year):
            raise ValidationError("Tax year must be in YYYY format")

        paid = self._repo.paid_processings_between(
            employee_id=int(employee_id), start_period=f"{year}-01", end_period=f"{year}-12"
        )
        taxable = sum((p.gross_salary for p in paid), ZERO)
        tax_paid = sum((p.tax_amount for p in paid), ZERO)
        liability = self._calculator.annual_income_tax(taxable)
        return TaxCalculation(
            employee_id=int(employee_id),
            tax_year=year,
            taxable_income=taxable,
            tax_liability=liability,
            tax_paid=tax_paid,
            tax_refund=max(ZERO, tax_paid - liability),
        )

    def payroll_summary(self, payroll_period: Any) -> PayrollSummary:
        period = require_payroll_period(payroll_period)
        records = self._repo.processings_for_period(period)
        return PayrollSummary(
            payroll_period=period,
            total_employees=len(records),
            total_gross_salary=sum((r.gross_salary for r in records), ZERO),
            total_deductions=sum((r.deductions for r in records), ZERO),
            total_net_salary=sum((r.net_salary for r in records), ZERO),
            total_tax=sum((r.tax_amount for r in records), ZERO),
            processed_employees=sum(1 for r in records if r.status != SalaryStatus.PENDING),
            pending_employees=sum(1 for r in records if r.status == SalaryStatus.PENDING),
        )
