"""Unit tests for TenantProvisioningService (step order, transaction boundary, skips, failures)."""

from unittest.mock import AsyncMock

import pytest
from botocore.exceptions import ClientError

from app.application.dtos.tenant import ProvisioningOptions, TenantProvisioningInput
from app.application.dtos.user import AdminUserInput, IdentityUser
from app.application.services import TenantProvisioningService
from app.application.services.step_log import PROVISIONING_STEPS
from app.domain.enums import BucketStatus, TenantStatus
from app.domain.events import LifecycleEvent, LifecycleEventDispatcher
from app.domain.exceptions import (
    DuplicateEmailException,
    DuplicateNameException,
    ExternalServiceException,
    OrganizationNotFoundException,
    PlanNotFoundException,
    ProvisioningException,
    ValidationException,
)
from app.infrastructure.external.identity import DisabledIdentityProvider
from app.infrastructure.external.storage import TenantBucketService
from app.infrastructure.services import (
    InMemoryRoleProvisioner,
    PlaceholderDropdownSeeder,
    PlaceholderNotificationService,
    PlaceholderSubscriptionService,
)
from tests.fakes import FakeS3Client, FakeUnitOfWork

ADMIN = AdminUserInput(name="Jane Admin", email="jane@acme.test", password="SecurePass123!")


def _service(
    uow: FakeUnitOfWork,
    storage: TenantBucketService,
    identity_provider=None,
    events: LifecycleEventDispatcher | None = None,
) -> TenantProvisioningService:
    return TenantProvisioningService(
        uow,
        storage,
        identity_provider or DisabledIdentityProvider(),
        PlaceholderSubscriptionService(),
        InMemoryRoleProvisioner(),
        PlaceholderDropdownSeeder(),
        PlaceholderNotificationService(),
        events,
        bucket_prefix="fulq-org",
    )


def _statuses(steps: dict) -> dict[str, str]:
    return {name: step["status"] for name, step in steps.items()}


async def test_full_provisioning_with_admin_user(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    service = _service(uow, bucket_service)
    result = await service.provision_tenant(
        TenantProvisioningInput(
            organization_name="Acme Pty Ltd", email="ops@acme.test", admin_user=ADMIN
        )
    )

    assert result.success is True
    assert result.failed_step is None
    assert result.transaction_id.startswith("txn_")
    assert list(result.provisioning_steps) == list(PROVISIONING_STEPS)
    assert _statuses(result.provisioning_steps) == {
        "step_1_organisation": "completed",
        "step_2_plan": "completed",
        "step_3_tenant": "completed",
        "step_4_subscription": "skipped",
        "step_5_client_admin_role": "completed",
        "step_6_dropdowns": "skipped",
        "step_7_user_creation": "completed",
        "step_8_welcome_email": "skipped",
        "step_9_s3_bucket": "completed",
        "step_10_saas_notification": "skipped",
        "step_11_audit_log": "completed",
    }
    for name in ("step_4_subscription", "step_6_dropdowns", "step_8_welcome_email"):
        assert result.provisioning_steps[name]["skip_reason"] == "not_implemented"

    tenant = result.tenant
    assert tenant.status is TenantStatus.TRIAL
    assert tenant.is_trial is True
    assert result.plan.name == "Basic Plan"
    assert result.organization.tenant_id == tenant.id
    assert result.role.name == "ClientAdmin"
    assert result.user.role_ids == (result.role.id,)
    assert uow.committed.password_hashes[result.user.id] != ADMIN.password

    expected_bucket = f"fulq-org-acme-pty-ltd-{tenant.id}"
    assert result.bucket_info.bucket_name == expected_bucket
    assert tenant.bucket_name == expected_bucket
    assert tenant.bucket_status is BucketStatus.CREATED
    assert tenant.bucket_region == "ap-southeast-2"
    assert expected_bucket in s3_client.buckets

    assert result.audit_log_initialized is True
    entries = uow.audit_logs.for_tenant(tenant.id)
    assert [e.action for e in entries] == ["tenant_provisioning_completed"]
    assert entries[0].details["actor_type"] == "admin"
    assert entries[0].details["s3_bucket_created"] is True


async def test_active_tenant_when_not_trial(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    result = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Beta Co", is_trial=False)
    )
    assert result.tenant.status is TenantStatus.ACTIVE


async def test_without_admin_user_steps_are_not_applicable(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    result = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd")
    )
    steps = result.provisioning_steps
    assert result.user is None
    assert steps["step_7_user_creation"]["skip_reason"] == "not_applicable"
    assert steps["step_8_welcome_email"]["skip_reason"] == "not_applicable"
    assert uow.audit_logs.for_tenant(result.tenant.id)[0].details["actor_type"] == "system"


async def test_disabled_options_skip_steps(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    options = ProvisioningOptions(
        create_user=False,
        create_subscription=False,
        seed_dropdowns=False,
        send_welcome_email=False,
        create_s3_bucket=False,
        send_saas_notification=False,
        initialize_audit_log=False,
    )
    result = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN), options
    )
    skipped = {
        name: step["skip_reason"]
        for name, step in result.provisioning_steps.items()
        if step["status"] == "skipped"
    }
    assert skipped == {
        "step_4_subscription": "disabled",
        "step_6_dropdowns": "disabled",
        "step_7_user_creation": "disabled",
        "step_8_welcome_email": "disabled",
        "step_9_s3_bucket": "disabled",
        "step_10_saas_notification": "disabled",
        "step_11_audit_log": "disabled",
    }
    assert result.bucket_info is None
    assert result.audit_log_initialized is False
    assert s3_client.buckets == {}


async def test_missing_organization_name_fails_before_any_step(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="   ")
        )
    assert exc_info.value.details == {"field": "organization_name"}
    assert uow.commits == 0


async def test_incomplete_admin_user_fails_validation(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    with pytest.raises(ValidationException, match="User name, email, and password"):
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(
                organization_name="Acme",
                admin_user=AdminUserInput(name="Jane", email="jane@acme.test", password=""),
            )
        )


async def test_duplicate_organization_name_aborts_without_side_effects(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    service = _service(uow, bucket_service)
    await service.provision_tenant(TenantProvisioningInput(organization_name="Acme Pty Ltd"))
    buckets_before = set(s3_client.buckets)

    with pytest.raises(ProvisioningException) as exc_info:
        await service.provision_tenant(TenantProvisioningInput(organization_name="Acme Pty Ltd"))

    exc = exc_info.value
    assert isinstance(exc.cause, DuplicateNameException)
    assert isinstance(exc.__cause__, DuplicateNameException)
    assert exc.failed_step == "step_1_organisation"
    steps = exc.details["provisioning_steps"]
    assert steps["step_1_organisation"]["status"] == "failed"
    assert steps["step_2_plan"]["skip_reason"] == "aborted"
    assert len(uow.committed.organizations) == 1
    assert set(s3_client.buckets) == buckets_before


async def test_duplicate_email_rolls_back_whole_transaction(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    """A failure at step 7 undoes steps 1-3 and never reaches the bucket step."""
    uow.users.add("other-tenant", "jane@acme.test")
    await uow.commit()

    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
        )

    assert isinstance(exc_info.value.cause, DuplicateEmailException)
    assert exc_info.value.failed_step == "step_7_user_creation"
    assert uow.committed.organizations == {}
    assert uow.committed.tenants == {}
    assert uow.state.tenants == {}
    assert s3_client.buckets == {}


async def test_without_transaction_earlier_steps_stay_committed(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    uow.users.add("other-tenant", "jane@acme.test")
    await uow.commit()

    with pytest.raises(ProvisioningException):
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN),
            ProvisioningOptions(use_transaction=False),
        )

    assert len(uow.committed.organizations) == 1
    assert len(uow.committed.tenants) == 1
    assert s3_client.buckets == {}


async def test_bucket_failure_after_commit_keeps_tenant(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    s3_client.fail["create_bucket"] = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "CreateBucket"
    )

    result = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    assert result.success is False
    assert result.failed_step == "step_9_s3_bucket"
    assert result.error["error"] == "STORAGE_ERROR"
    steps = result.provisioning_steps
    assert steps["step_9_s3_bucket"]["status"] == "failed"
    assert steps["step_10_saas_notification"]["skip_reason"] == "aborted"
    assert steps["step_11_audit_log"]["skip_reason"] == "aborted"
    assert result.audit_log_initialized is False
    stored = uow.committed.tenants[result.tenant.id]
    assert stored.bucket_status is BucketStatus.FAILED
    assert result.user.id in uow.committed.users


async def test_existing_bucket_is_reattached(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    first = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd")
    )
    second = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_id=first.organization.id)
    )

    assert second.tenant.id == first.tenant.id
    assert second.provisioning_steps["step_1_organisation"]["details"]["action"] == "selected"
    assert second.provisioning_steps["step_3_tenant"]["details"]["action"] == "updated"
    assert second.bucket_info.status == "already_exists"
    assert second.bucket_info.bucket_name == first.tenant.bucket_name
    assert len(s3_client.buckets) == 1


async def test_unknown_organization_id(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_id="missing")
        )
    assert isinstance(exc_info.value.cause, OrganizationNotFoundException)


async def test_unknown_plan_id(uow: FakeUnitOfWork, bucket_service: TenantBucketService) -> None:
    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme", plan_id="gold")
        )
    assert isinstance(exc_info.value.cause, PlanNotFoundException)
    assert exc_info.value.failed_step == "step_2_plan"


async def test_identity_provider_account_created_and_linked(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    identity = AsyncMock()
    identity.enabled = True
    identity.get_user_by_email.return_value = None
    identity.create_user.return_value = IdentityUser(user_id="auth0|abc", email=ADMIN.email)

    result = await _service(uow, bucket_service, identity).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    identity.create_user.assert_awaited_once()
    kwargs = identity.create_user.await_args.kwargs
    assert kwargs["tenant_id"] == result.tenant.id
    assert kwargs["role_ids"] == (result.role.id,)
    assert result.user.identity_provider_id == "auth0|abc"
    details = result.provisioning_steps["step_7_user_creation"]["details"]
    assert details["identity_action"] == "created"


async def test_identity_provider_existing_account_is_linked(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    identity = AsyncMock()
    identity.enabled = True
    identity.get_user_by_email.return_value = IdentityUser(user_id="auth0|old", email=ADMIN.email)

    result = await _service(uow, bucket_service, identity).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    identity.create_user.assert_not_awaited()
    assert result.user.identity_provider_id == "auth0|old"


async def test_audit_failure_is_not_fatal(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    uow.audit_logs.fail_with = RuntimeError("audit sink down")

    result = await _service(uow, bucket_service).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd")
    )

    assert result.success is True
    assert result.audit_log_initialized is False
    assert result.provisioning_steps["step_11_audit_log"]["status"] == "failed"
    assert result.tenant.id in uow.committed.tenants


async def test_events_dispatched(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    events = LifecycleEventDispatcher()
    provisioned: list[dict] = []
    saved: list[dict] = []

    async def on_provisioned(payload: dict) -> None:
        provisioned.append(payload)

    async def on_saved(payload: dict) -> None:
        saved.append(payload)

    events.register(LifecycleEvent.TENANT_PROVISIONED, "test", on_provisioned)
    events.register(LifecycleEvent.RECORD_SAVED, "test", on_saved)

    result = await _service(uow, bucket_service, events=events).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    assert provisioned == [
        {
            "tenant_id": result.tenant.id,
            "organization_id": result.organization.id,
            "transaction_id": result.transaction_id,
            "success": True,
        }
    ]
    assert [p["record_type"] for p in saved] == ["organization", "tenant", "user"]


async def test_no_events_when_persistence_fails(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    events = LifecycleEventDispatcher()
    handler = AsyncMock()
    events.register(LifecycleEvent.RECORD_SAVED, "test", handler)
    events.register(LifecycleEvent.TENANT_PROVISIONED, "test", handler)

    with pytest.raises(ProvisioningException):
        await _service(uow, bucket_service, events=events).provision_tenant(
            TenantProvisioningInput(organization_name="Acme", plan_id="missing")
        )
    handler.assert_not_awaited()


async def test_identity_create_conflict_links_account_found_on_second_lookup(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    """A 409 from create means the account exists but was not yet searchable."""
    identity = AsyncMock()
    identity.enabled = True
    identity.get_user_by_email.side_effect = [
        None,
        IdentityUser(user_id="auth0|late", email=ADMIN.email),
    ]
    identity.create_user.side_effect = ExternalServiceException(
        "auth0", "create_user", "HTTP 409: The user already exists."
    )

    result = await _service(uow, bucket_service, identity).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    assert result.success is True
    assert identity.get_user_by_email.await_count == 2
    assert result.user.identity_provider_id == "auth0|late"
    assert uow.committed.users[result.user.id].identity_provider_id == "auth0|late"
    details = result.provisioning_steps["step_7_user_creation"]["details"]
    assert details["identity_action"] == "linked_after_conflict"
    assert details["identity_provider_id"] == "auth0|late"


async def test_identity_account_missing_after_failed_create_is_a_warning(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    identity = AsyncMock()
    identity.enabled = True
    identity.get_user_by_email.return_value = None
    identity.create_user.side_effect = ExternalServiceException(
        "auth0", "create_user", "HTTP 409: The user already exists."
    )

    result = await _service(uow, bucket_service, identity).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    assert result.success is True
    assert result.failed_step is None
    step = result.provisioning_steps["step_7_user_creation"]
    assert step["status"] == "completed"
    assert step["details"]["identity_action"] == "failed"
    assert step["details"]["warning"]["error"] == "EXTERNAL_SERVICE_ERROR"
    assert result.user.identity_provider_id is None
    assert result.tenant.id in uow.committed.tenants
    assert result.user.id in uow.committed.users
    assert result.bucket_info.bucket_name in s3_client.buckets


async def test_identity_provider_outage_keeps_committed_tenant(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    identity = AsyncMock()
    identity.enabled = True
    identity.get_user_by_email.side_effect = ExternalServiceException(
        "auth0", "get_user_by_email", "HTTP 503"
    )

    result = await _service(uow, bucket_service, identity).provision_tenant(
        TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
    )

    assert result.success is True
    identity.create_user.assert_not_awaited()
    details = result.provisioning_steps["step_7_user_creation"]["details"]
    assert details["identity_action"] == "failed"
    assert result.tenant.id in uow.committed.tenants


async def test_identity_provider_untouched_when_persistence_fails(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    uow.users.add("other-tenant", "jane@acme.test")
    await uow.commit()
    identity = AsyncMock()
    identity.enabled = True

    with pytest.raises(ProvisioningException):
        await _service(uow, bucket_service, identity).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
        )

    identity.get_user_by_email.assert_not_awaited()
    identity.create_user.assert_not_awaited()


async def test_failed_transaction_commit_is_reported_as_its_own_step(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService, s3_client: FakeS3Client
) -> None:
    uow.fail_commit_with = RuntimeError("connection reset during COMMIT")

    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
        )

    error = exc_info.value
    assert error.failed_step == "transaction_commit"
    steps = error.details["provisioning_steps"]
    for name in PROVISIONING_STEPS[:7]:
        assert steps[name]["status"] in ("completed", "skipped")
    assert steps["step_1_organisation"]["details"]["rolled_back"] is True
    assert steps["step_7_user_creation"]["details"]["rolled_back"] is True
    assert steps["step_8_welcome_email"]["skip_reason"] == "aborted"
    assert uow.state.tenants == {}
    assert s3_client.buckets == {}


async def test_steps_before_a_failure_are_marked_rolled_back(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    uow.users.add("other-tenant", "jane@acme.test")
    await uow.commit()

    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN)
        )

    steps = exc_info.value.details["provisioning_steps"]
    assert steps["step_3_tenant"]["status"] == "completed"
    assert steps["step_3_tenant"]["details"]["rolled_back"] is True
    assert steps["step_7_user_creation"]["status"] == "failed"
    assert "rolled_back" not in steps["step_7_user_creation"]["details"]


async def test_without_transaction_completed_steps_are_not_marked_rolled_back(
    uow: FakeUnitOfWork, bucket_service: TenantBucketService
) -> None:
    uow.users.add("other-tenant", "jane@acme.test")
    await uow.commit()

    with pytest.raises(ProvisioningException) as exc_info:
        await _service(uow, bucket_service).provision_tenant(
            TenantProvisioningInput(organization_name="Acme Pty Ltd", admin_user=ADMIN),
            ProvisioningOptions(use_transaction=False),
        )

    details = exc_info.value.details["provisioning_steps"]["step_3_tenant"]["details"]
    assert "rolled_back" not in details
