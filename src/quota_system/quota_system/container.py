from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PAGE_LIMIT, EMPLOYEE_FIELD_NAME, RESERVE_DAYS_FORM_NAME
from .database.connection import DBConfig, DatabaseConnection
from .forms.mysql_form_repository import MySQLFormSchemaRepository
from .forms.mysql_submission_repository import MySQLSubmissionRepository
from .forms.repository import FormSchemaRepository, SubmissionRepository
from .forms.resolver import ReferenceResolver
from .forms.service import FormSubmissionService
from .quotas.mysql_quota_repository import MySQLQuotaRepository
from .quotas.occupancy import OccupancyCalculator
from .quotas.repository import QuotaRepository
from .quotas.service import QuotaService
from .reservations.mysql_reservation_repository import MySQLReservationRepository
from .reservations.repository import ReservationRepository
from .scheduling.service import SchedulingService


@dataclass(frozen=True)
class ServiceSettings:
    reserve_days_form_name: str = RESERVE_DAYS_FORM_NAME
    employee_field_name: str = EMPLOYEE_FIELD_NAME
    default_page_limit: int = DEFAULT_PAGE_LIMIT
    default_history_limit: int = DEFAULT_HISTORY_LIMIT

    @classmethod
    def from_module(cls, settings) -> "ServiceSettings":
        return cls(
            reserve_days_form_name=getattr(settings, "RESERVE_DAYS_FORM_NAME", RESERVE_DAYS_FORM_NAME),
            employee_field_name=getattr(settings, "EMPLOYEE_FIELD_NAME", EMPLOYEE_FIELD_NAME),
            default_page_limit=int(getattr(settings, "DEFAULT_PAGE_LIMIT", DEFAULT_PAGE_LIMIT)),
            default_history_limit=int(getattr(settings, "DEFAULT_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
        )


@dataclass(frozen=True)
class Container:
    settings: ServiceSettings

    schemas_repo: FormSchemaRepository
    submissions_repo: SubmissionRepository
    quotas_repo: QuotaRepository
    reservations_repo: ReservationRepository

    form_service: FormSubmissionService
    quota_service: QuotaService
    attendance_service: AttendanceService
    scheduling_service: SchedulingService


def wire(
    *,
    settings: ServiceSettings,
    schemas_repo: FormSchemaRepository,
    submissions_repo: SubmissionRepository,
    quotas_repo: QuotaRepository,
    reservations_repo: ReservationRepository,
    attendance_service: Optional[AttendanceService] = None,
) -> Container:
    """Assemble services over the given repositories (MySQL-backed or in-memory)."""

    resolver = ReferenceResolver(submissions_repo)
    form_service = FormSubmissionService(schemas_repo, submissions_repo, resolver)
    scheduling_service = SchedulingService(
        quotas_repo,
        reservations_repo,
        OccupancyCalculator(reservations_repo),
        form_service,
        resolver,
        reserve_form_name=settings.reserve_days_form_name,
        employee_field=settings.employee_field_name,
    )

    return Container(
        settings=settings,
        schemas_repo=schemas_repo,
        submissions_repo=submissions_repo,
        quotas_repo=quotas_repo,
        reservations_repo=reservations_repo,
        form_service=form_service,
        quota_service=QuotaService(quotas_repo),
        attendance_service=attendance_service or AttendanceService(quotas_repo, reservations_repo),
        scheduling_service=scheduling_service,
    )


def build_container(*, db_config: dict, settings: Optional[ServiceSettings] = None) -> Container:
    settings = settings or ServiceSettings()
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        settings=settings,
        schemas_repo=MySQLFormSchemaRepository(conn),
        submissions_repo=MySQLSubmissionRepository(conn),
        quotas_repo=MySQLQuotaRepository(conn),
        reservations_repo=MySQLReservationRepository(
            conn,
            form_name=settings.reserve_days_form_name,
            employee_field=settings.employee_field_name,
        ),
    )
