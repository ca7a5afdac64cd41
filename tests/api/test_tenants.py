"""Tests for the admin tenant endpoints.

The orchestrators are overridden with instances over the in-memory unit of
work and the fake S3 client, so no database or AWS is needed.
"""

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_deletion_service,
    get_file_service,
    get_plan_limit_service,
    get_provisioning_service,
)
from app.application.services import (
    TenantDeletionService,
    TenantFileService,
    TenantPlanLimitService,
    TenantProvisioningService,
)
from app.core.config import get_settings
from app.domain.enums import TenantRecordType
from app.infrastructure.external.identity import DisabledIdentityProvider
from app.infrastructure.external.storage import TenantBucketService
from app.infrastructure.services import (
    InMemoryRoleProvisioner,
    PlaceholderDropdownSeeder,
    PlaceholderNotificationService,
    PlaceholderSubscriptionService,
)
from app.main import app
from tests.fakes import FakeS3Client, FakeUnitOfWork

BASE = "/api/v1/admin/tenants"

PROVISION_BODY = {
    "organization_name": "Acme Pty Ltd",
    "email": "ops@acme.test",
    "is_trial": True,
    "admin_user": {
        "name": "Jane Admin",
        "email": "jane@acme.test",
        "password": "SecurePass123!",
    },
}


@pytest.fixture
def services(uow: FakeUnitOfWork, bucket_service: TenantBucketService):
    """Route the admin API to services over the shared fakes."""
    app.dependency_overrides[get_provisioning_service] = lambda: TenantProvisioningService(
        uow,
        bucket_service,
        DisabledIdentityProvider(),
        PlaceholderSubscriptionService(),
        InMemoryRoleProvisioner(),
        PlaceholderDropdownSeeder(),
        PlaceholderNotificationService(),
        bucket_prefix="fulq-org",
    )
    app.dependency_overrides[get_deletion_service] = lambda: TenantDeletionService(
        uow, bucket_service, bucket_prefix="fulq-org", retention_days=90
    )
    app.dependency_overrides[get_plan_limit_service] = lambda: TenantPlanLimitService(uow)
    app.dependency_overrides[get_file_service] = lambda: TenantFileService(
        uow, bucket_service, TenantPlanLimitService(uow), bucket_prefix="fulq-org"
    )
    yield uow
    app.dependency_overrides.clear()


async def _provision(client: AsyncClient, headers: dict[str, str]) -> dict:
    response = await client.post(f"{BASE}/provision", json=PROVISION_BODY, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_missing_secret_returns_401(client: AsyncClient, services) -> None:
    response = await client.post(f"{BASE}/provision", json=PROVISION_BODY)
    assert response.status_code == 401


async def test_wrong_secret_returns_401(client: AsyncClient, services) -> None:
    response = await client.get(
        f"{BASE}/some-tenant/usage", headers={"X-Admin-Secret": "not-the-secret"}
    )
    assert response.status_code == 401


async def test_unconfigured_secret_returns_503(
    client: AsyncClient, services, admin_headers, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("ADMIN_API_SECRET")
    get_settings.cache_clear()
    response = await client.get(f"{BASE}/some-tenant/usage", headers=admin_headers)
    assert response.status_code == 503


async def test_provision_requires_organization(
    client: AsyncClient, services, admin_headers
) -> None:
    response = await client.post(
        f"{BASE}/provision", json={"email": "ops@acme.test"}, headers=admin_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_provision_rejects_short_admin_password(
    client: AsyncClient, services, admin_headers
) -> None:
    body = {**PROVISION_BODY, "admin_user": {**PROVISION_BODY["admin_user"], "password": "short"}}
    response = await client.post(f"{BASE}/provision", json=body, headers=admin_headers)
    assert response.status_code == 422


async def test_provision_returns_created_tenant(
    client: AsyncClient, services, admin_headers, s3_client: FakeS3Client
) -> None:
    data = await _provision(client, admin_headers)

    assert data["success"] is True
    assert data["failed_step"] is None
    assert data["organization"]["name"] == "Acme Pty Ltd"
    assert data["tenant"]["status"] == "trial"
    assert data["tenant"]["bucket_status"] == "created"
    assert data["plan"]["name"] == "Basic Plan"
    assert data["user"]["email"] == "jane@acme.test"
    assert "password" not in data["user"]
    bucket = data["bucket_info"]["bucket_name"]
    assert bucket.startswith("fulq-org-acme-pty-ltd-")
    assert bucket in s3_client.buckets
    assert data["provisioning_steps"]["step_1_organisation"]["status"] == "completed"


async def test_duplicate_organization_returns_409(
    client: AsyncClient, services, admin_headers
) -> None:
    await _provision(client, admin_headers)
    body = {**PROVISION_BODY, "admin_user": None}
    response = await client.post(f"{BASE}/provision", json=body, headers=admin_headers)
    assert response.status_code == 409
    payload = response.json()
    assert payload["error"] == "PROVISIONING_FAILED"
    assert payload["details"]["failed_step"] == "step_1_organisation"


async def test_usage_reports_record_counts(
    client: AsyncClient, services, admin_headers
) -> None:
    tenant_id = (await _provision(client, admin_headers))["tenant"]["id"]
    services.records.seed(TenantRecordType.DOCUMENTS, tenant_id, 4)

    response = await client.get(f"{BASE}/{tenant_id}/usage", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["tenant_name"] == "Acme Pty Ltd"
    assert data["counts"]["documents"] == 4


async def test_usage_unknown_tenant_returns_404(
    client: AsyncClient, services, admin_headers
) -> None:
    response = await client.get(f"{BASE}/missing/usage", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "TENANT_NOT_FOUND"


async def test_deactivate_marks_tenant_inactive(
    client: AsyncClient, services, admin_headers
) -> None:
    tenant_id = (await _provision(client, admin_headers))["tenant"]["id"]

    response = await client.post(
        f"{BASE}/{tenant_id}/deactivate",
        json={"actor_id": "admin_1", "actor_email": "root@acme.test"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["previous_status"] == "trial"
    assert data["new_status"] == "inactive"
    assert data["audit_logged"] is True


async def test_deactivate_without_body(client: AsyncClient, services, admin_headers) -> None:
    tenant_id = (await _provision(client, admin_headers))["tenant"]["id"]
    response = await client.post(f"{BASE}/{tenant_id}/deactivate", headers=admin_headers)
    assert response.status_code == 200


async def test_delete_with_active_users_returns_409(
    client: AsyncClient, services, admin_headers
) -> None:
    tenant_id = (await _provision(client, admin_headers))["tenant"]["id"]
    response = await client.delete(f"{BASE}/{tenant_id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "ACTIVE_USERS_EXIST"


async def test_forced_immediate_delete_removes_tenant_and_bucket(
    client: AsyncClient, services, admin_headers, s3_client: FakeS3Client
) -> None:
    provisioned = await _provision(client, admin_headers)
    tenant_id = provisioned["tenant"]["id"]
    bucket = provisioned["bucket_info"]["bucket_name"]
    s3_client.put_object(bucket, "docs/contract.pdf")

    response = await client.delete(
        f"{BASE}/{tenant_id}",
        params={"force_delete": "true", "immediate_s3_delete": "true"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["s3_deletion_type"] == "immediate"
    assert data["s3"]["objects_deleted"] == 1
    assert data["database"]["counts"]["users"] == 1
    assert bucket not in s3_client.buckets

    again = await client.get(f"{BASE}/{tenant_id}/usage", headers=admin_headers)
    assert again.status_code == 404


async def test_delete_keeping_storage_skips_s3(
    client: AsyncClient, services, admin_headers, s3_client: FakeS3Client
) -> None:
    provisioned = await _provision(client, admin_headers)
    tenant_id = provisioned["tenant"]["id"]

    response = await client.delete(
        f"{BASE}/{tenant_id}",
        params={"force_delete": "true", "delete_s3": "false"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["s3"] is None
    assert data["s3_deletion_type"] is None
    assert provisioned["bucket_info"]["bucket_name"] in s3_client.buckets


async def test_limits_report_usage_and_ceilings(
    client: AsyncClient, services, admin_headers
) -> None:
    tenant_id = (await _provision(client, admin_headers))["tenant"]["id"]
    services.records.seed(TenantRecordType.SITES, tenant_id, 2)

    response = await client.get(f"{BASE}/{tenant_id}/limits", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["users"] == 1
    assert data["sites"] == 2
    assert data["limits"]["users"] is None


async def test_limits_unknown_tenant_returns_404(
    client: AsyncClient, services, admin_headers
) -> None:
    response = await client.get(f"{BASE}/missing/limits", headers=admin_headers)
    assert response.status_code == 404


async def test_bucket_details_of_provisioned_tenant(
    client: AsyncClient, services, admin_headers
) -> None:
    provisioned = await _provision(client, admin_headers)
    tenant_id = provisioned["tenant"]["id"]

    response = await client.get(f"{BASE}/{tenant_id}/bucket", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["bucket_name"] == provisioned["bucket_info"]["bucket_name"]
    assert data["exists"] is True
    assert data["region"] == "ap-southeast-2"
