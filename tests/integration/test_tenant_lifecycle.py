"""End-to-end tenant lifecycle over the in-memory unit of work and S3 client.

Provision "Acme Pty Ltd" with an admin user, deactivate it, then remove it
with immediate bucket deletion.
"""

import pytest

from app.application.dtos.tenant import DeletionOptions, TenantProvisioningInput
from app.application.dtos.user import AdminUserInput
from app.application.services import TenantDeletionService, TenantProvisioningService
from app.domain.enums import StorageDeletionType, TenantStatus
from app.domain.events import LifecycleEvent, LifecycleEventDispatcher
from app.domain.exceptions import ActiveUsersExistException
from app.infrastructure.external.identity import DisabledIdentityProvider
from app.infrastructure.external.storage import TenantBucketService
from app.infrastructure.services import (
    InMemoryRoleProvisioner,
    PlaceholderDropdownSeeder,
    PlaceholderNotificationService,
    PlaceholderSubscriptionService,
)
from tests.fakes import FakeS3Client, FakeUnitOfWork


async def test_acme_lifecycle(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    events = LifecycleEventDispatcher()
    seen: list[str] = []

    def recorder(event: LifecycleEvent):
        async def handle(payload: dict) -> None:
            seen.append(event.value)

        return handle

    for event in LifecycleEvent:
        events.register(event, "recorder", recorder(event))

    provisioning = TenantProvisioningService(
        uow,
        bucket_service,
        DisabledIdentityProvider(),
        PlaceholderSubscriptionService(),
        InMemoryRoleProvisioner(),
        PlaceholderDropdownSeeder(),
        PlaceholderNotificationService(),
        events,
    )
    deletion = TenantDeletionService(uow, bucket_service, events)

    provisioned = await provisioning.provision_tenant(
        TenantProvisioningInput(
            organization_name="Acme Pty Ltd",
            email="ops@acme.test",
            phone="+61 2 5550 1234",
            admin_user=AdminUserInput(
                name="Jane Admin", email="Jane@Acme.test", password="SecurePass123!"
            ),
        )
    )
    tenant_id = provisioned.tenant.id
    bucket_name = provisioned.tenant.bucket_name
    assert provisioned.success
    assert provisioned.user.email == "jane@acme.test"
    assert bucket_name == f"fulq-org-acme-pty-ltd-{tenant_id}"
    s3_client.put_object(Bucket=bucket_name, Key="documents/lease.pdf")

    usage = await deletion.get_tenant_usage(tenant_id)
    assert usage.counts["users"] == 1
    assert usage.counts["organizations"] == 1
    assert usage.counts["audit_logs"] == 1

    with pytest.raises(ActiveUsersExistException):
        await deletion.delete_tenant_completely(tenant_id)

    deactivated = await deletion.soft_delete_tenant(tenant_id)
    assert deactivated.previous_status is TenantStatus.TRIAL
    assert uow.committed.tenants[tenant_id].status is TenantStatus.INACTIVE

    deleted = await deletion.delete_tenant_completely(
        tenant_id, DeletionOptions(force_delete=True, immediate_s3_delete=True)
    )
    assert deleted.success
    assert deleted.s3_deletion_type is StorageDeletionType.IMMEDIATE
    assert deleted.s3.objects_deleted == 1
    assert deleted.database.counts["users"] == 1
    assert deleted.database.counts["organizations"] == 1
    # provisioning + soft delete + final entry
    assert deleted.database.counts["audit_logs"] == 3
    assert bucket_name not in s3_client.buckets
    assert uow.committed.tenants == {}
    assert uow.committed.organizations == {}
    assert uow.committed.users == {}
    assert uow.committed.audit_logs == []

    assert seen.count("record.saved") == 3
    assert seen[-2:] == ["tenant.deactivated", "tenant.deleted"]
    assert "tenant.provisioned" in seen


async def test_reprovision_after_deletion_reuses_name(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    """The organization name is free again once its tenant is deleted."""
    provisioning = TenantProvisioningService(
        uow,
        bucket_service,
        DisabledIdentityProvider(),
        PlaceholderSubscriptionService(),
        InMemoryRoleProvisioner(),
        PlaceholderDropdownSeeder(),
        PlaceholderNotificationService(),
    )
    deletion = TenantDeletionService(uow, bucket_service)

    first = await provisioning.provision_tenant(TenantProvisioningInput(organization_name="Acme"))
    await deletion.delete_tenant_completely(first.tenant.id)
    second = await provisioning.provision_tenant(TenantProvisioningInput(organization_name="Acme"))

    assert second.success
    assert second.tenant.id != first.tenant.id
