"""SQLAlchemy failures surface from the repositories as domain exceptions."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.domain.enums import TenantRecordType, TenantStatus
from app.domain.exceptions import (
    DatabaseOperationException,
    DuplicateEmailException,
    DuplicateNameException,
    TenantNotFoundException,
)
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    OrganizationRepository,
    TenantRecordRepository,
    TenantRepository,
    UserRepository,
)


def _connection_lost() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("server closed the connection"))


def _unique_violation() -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))


@pytest.fixture
def session() -> MagicMock:
    db = MagicMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    return db


async def test_bulk_record_delete_failure_is_database_error(session: MagicMock) -> None:
    session.execute.side_effect = _connection_lost()

    with pytest.raises(DatabaseOperationException) as exc_info:
        await TenantRecordRepository(session).delete_by_tenant(TenantRecordType.DOCUMENTS, "t1")

    assert exc_info.value.error_code == "DATABASE_ERROR"
    assert exc_info.value.details["operation"] == "delete documents"
    assert "server closed the connection" in exc_info.value.details["reason"]


async def test_record_count_failure_is_database_error(session: MagicMock) -> None:
    session.execute.side_effect = _connection_lost()

    with pytest.raises(DatabaseOperationException) as exc_info:
        await TenantRecordRepository(session).count_by_tenant(TenantRecordType.SITES, "t1")

    assert exc_info.value.details["operation"] == "count sites"


async def test_tenant_row_delete_failure_is_database_error(session: MagicMock) -> None:
    session.execute.side_effect = _connection_lost()

    with pytest.raises(DatabaseOperationException) as exc_info:
        await TenantRepository(session).delete_tenant("t1")

    assert exc_info.value.details["operation"] == "delete tenant"


async def test_lookup_failure_is_database_error(session: MagicMock) -> None:
    session.execute.side_effect = _connection_lost()

    with pytest.raises(DatabaseOperationException) as exc_info:
        await TenantRepository(session).get_by_id("t1")

    assert exc_info.value.details["operation"] == "get tenant"


async def test_status_update_of_vanished_tenant_raises_not_found(session: MagicMock) -> None:
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    session.execute.return_value = result

    with pytest.raises(TenantNotFoundException):
        await TenantRepository(session).update_status("t1", TenantStatus.INACTIVE)


async def test_audit_append_failure_is_database_error(session: MagicMock) -> None:
    session.flush.side_effect = _connection_lost()
    entry = AuditLogEntryCreate(
        tenant_id="t1", action="delete", resource_type="tenant", resource_id="t1"
    )

    with pytest.raises(DatabaseOperationException) as exc_info:
        await AuditLogRepository(session).create(entry)

    assert exc_info.value.details["operation"] == "create audit_log"
    session.add.assert_called_once()


async def test_unique_email_violation_is_still_duplicate_email(session: MagicMock) -> None:
    session.flush.side_effect = _unique_violation()

    with pytest.raises(DuplicateEmailException):
        await UserRepository(session).create_user(
            tenant_id="t1",
            name="Jane",
            email="jane@acme.test",
            password="SecurePass123!",
            role_ids=("role_1",),
        )


async def test_unique_name_violation_is_still_duplicate_name(session: MagicMock) -> None:
    session.flush.side_effect = _unique_violation()

    with pytest.raises(DuplicateNameException):
        await OrganizationRepository(session).create_organization("Acme", None, None)


async def test_other_insert_failure_is_database_error(session: MagicMock) -> None:
    session.flush.side_effect = _connection_lost()

    with pytest.raises(DatabaseOperationException) as exc_info:
        await OrganizationRepository(session).create_organization("Acme", None, None)

    assert exc_info.value.details["operation"] == "create organization"
