from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .admission.mysql_admission_repository import MySQLAdmissionRepository
from .admission.repository import AdmissionRepository
from .admission.service import AdmissionService
from .certification.mysql_certification_repository import MySQLCertificationRepository
from .certification.repository import CertificationRepository
from .certification.service import CertificationService
from .database.connection import DBConfig, DatabaseConnection
from .finance.mysql_finance_repository import MySQLFinanceRepository
from .finance.repository import FinanceRepository
from .finance.service import FinanceService
from .hr.mysql_hr_repository import MySQLHRRepository
from .hr.repository import HRRepository
from .hr.service import HRService
from .multicampus.mysql_multicampus_repository import MySQLMultiCampusRepository
from .multicampus.repository import MultiCampusRepository
from .multicampus.service import MultiCampusService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    hr_repo: HRRepository
    payroll_repo: PayrollRepository
    certification_repo: CertificationRepository
    multicampus_repo: MultiCampusRepository
    admission_repo: AdmissionRepository
    finance_repo: FinanceRepository

    hr_service: HRService
    payroll_service: PayrollService
    certification_service: CertificationService
    multicampus_service: MultiCampusService
    admission_service: AdmissionService
    finance_service: FinanceService


def build_services(
    *,
    conn: Optional[DatabaseConnection],
    hr_repo: HRRepository,
    payroll_repo: PayrollRepository,
    certification_repo: CertificationRepository,
    multicampus_repo: MultiCampusRepository,
    admission_repo: AdmissionRepository,
    finance_repo: FinanceRepository,
) -> Container:
    """Wire services onto the given repositories (MySQL in the app, in-memory fakes in tests)."""
    return Container(
        conn=conn,
        hr_repo=hr_repo,
        payroll_repo=payroll_repo,
        certification_repo=certification_repo,
        multicampus_repo=multicampus_repo,
        admission_repo=admission_repo,
        finance_repo=finance_repo,
        hr_service=HRService(hr_repo),
        payroll_service=PayrollService(payroll_repo, calculator=StandardPayrollCalculator()),
        certification_service=CertificationService(certification_repo),
        multicampus_service=MultiCampusService(multicampus_repo),
        admission_service=AdmissionService(admission_repo),
        finance_service=FinanceService(finance_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        conn=conn,
        hr_repo=MySQLHRRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        certification_repo=MySQLCertificationRepository(conn),
        multicampus_repo=MySQLMultiCampusRepository(conn),
        admission_repo=MySQLAdmissionRepository(conn),
        finance_repo=MySQLFinanceRepository(conn),
    )
