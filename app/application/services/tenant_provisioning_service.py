"""Tenant provisioning: eleven ordered steps from organization to audit entry.

Steps 1-7 write rows through the unit of work. With use_transaction they run
in one transaction (rolled back on any failure); otherwise each step commits
on its own. Identity-provider linking for the step 7 user and steps 8-11 have
external side effects and run only after that commit, so a rollback never
strands anything outside the database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.application.dtos.capability import CapabilityResult
from app.application.dtos.role import RoleResult
from app.application.dtos.storage import BucketInfo
from app.application.dtos.tenant import (
    OrganizationResult,
    PlanResult,
    ProvisioningOptions,
    ProvisioningResult,
    TenantProvisioningInput,
    TenantResult,
)
from app.application.dtos.user import UserResult
from app.application.interfaces.repositories import IUnitOfWork
from app.application.interfaces.services import (
    IDropdownSeeder,
    IIdentityProvider,
    INotificationService,
    IRoleProvisioner,
    ISubscriptionService,
    ITenantBucketStorage,
)
from app.application.services.step_log import (
    PROVISIONING_STEPS,
    TRANSACTION_COMMIT_STEP,
    ProvisioningStep,
    ProvisioningStepLog,
    describe_error,
)
from app.domain.enums import BucketStatus, SkipReason
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
from app.shared.enums import ActorType, AuditAction, AuditResourceType
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.bucket_naming import generate_bucket_name
from app.shared.utils.datetime import isoformat_utc, utc_now
from app.shared.utils.generators import generate_transaction_id

logger = logging.getLogger(__name__)

_TOTAL_STEPS = len(PROVISIONING_STEPS)


@dataclass
class _ProvisioningRun:
    """Mutable state of one provision_tenant call."""

    data: TenantProvisioningInput
    options: ProvisioningOptions
    transaction_id: str
    steps: ProvisioningStepLog = field(default_factory=ProvisioningStepLog)
    organization: OrganizationResult | None = None
    plan: PlanResult | None = None
    tenant: TenantResult | None = None
    role: RoleResult | None = None
    user: UserResult | None = None
    bucket_info: BucketInfo | None = None
    audit_log_initialized: bool = False
    failed_step: str | None = None
    error: dict[str, Any] | None = None
    saved_records: list[tuple[str, str]] = field(default_factory=list)


class TenantProvisioningService:
    """Creates a tenant end-to-end and reports every step's outcome."""

    def __init__(
        self,
        uow: IUnitOfWork,
        storage: ITenantBucketStorage,
        identity_provider: IIdentityProvider,
        subscriptions: ISubscriptionService,
        roles: IRoleProvisioner,
        dropdowns: IDropdownSeeder,
        notifications: INotificationService,
        events: LifecycleEventDispatcher | None = None,
        *,
        bucket_prefix: str = "fulq-org",
    ) -> None:
        self.uow = uow
        self.storage = storage
        self.identity_provider = identity_provider
        self.subscriptions = subscriptions
        self.roles = roles
        self.dropdowns = dropdowns
        self.notifications = notifications
        self.events = events
        self.bucket_prefix = bucket_prefix

    @traced("tenant.provision")
    async def provision_tenant(
        self,
        data: TenantProvisioningInput,
        options: ProvisioningOptions | None = None,
    ) -> ProvisioningResult:
        """Run all eleven provisioning steps.

        Raises:
            ValidationException: required input missing (before any step runs).
            ProvisioningException: a persistence step (1-7) failed. Wraps the
                first failure; with use_transaction nothing was persisted.

        A failure in steps 8-10 does not raise: the committed tenant stays, the
        result has success=False and failed_step set, and later steps are
        skipped. Audit entry failures (step 11) are recorded but non-fatal.
        """
        options = options or ProvisioningOptions()
        self._validate_input(data, options)
        run = _ProvisioningRun(
            data=data, options=options, transaction_id=generate_transaction_id()
        )
        logger.info(
            "Starting tenant provisioning %s (organization=%s, use_transaction=%s)",
            run.transaction_id,
            data.organization_name or data.organization_id,
            options.use_transaction,
        )

        try:
            if options.use_transaction:
                async with self.uow.transaction():
                    await self._run_persistence_phase(run)
            else:
                await self._run_persistence_phase(run)
        except Exception as e:
            if not options.use_transaction:
                await self.uow.rollback()
            step = run.steps.in_progress()
            if step is not None:
                failed_step = step.name
                step.fail(e)
            elif options.use_transaction and run.steps["step_7_user_creation"].finished:
                # Every step returned; the commit itself failed.
                failed_step = TRANSACTION_COMMIT_STEP
            else:
                failed_step = PROVISIONING_STEPS[0]
            if options.use_transaction:
                run.steps.mark_rolled_back()
            run.steps.abort_remaining()
            logger.exception(
                "Tenant provisioning %s failed at %s%s",
                run.transaction_id,
                failed_step,
                ", transaction rolled back" if options.use_transaction else "",
            )
            raise ProvisioningException(
                e, failed_step, run.steps.to_dict(), run.transaction_id
            ) from e

        add_span_attributes(tenant_id=run.tenant.id, transaction_id=run.transaction_id)
        await self._dispatch_saved_records(run)
        await self._run_side_effect_phase(run)

        result = ProvisioningResult(
            organization=run.organization,
            tenant=run.tenant,
            plan=run.plan,
            role=run.role,
            user=run.user,
            bucket_info=run.bucket_info,
            audit_log_initialized=run.audit_log_initialized,
            transaction_id=run.transaction_id,
            provisioning_steps=run.steps.to_dict(),
            success=run.failed_step is None,
            failed_step=run.failed_step,
            error=run.error,
        )
        if self.events is not None:
            await self.events.dispatch(
                LifecycleEvent.TENANT_PROVISIONED,
                {
                    "tenant_id": result.tenant.id,
                    "organization_id": result.organization.id,
                    "transaction_id": result.transaction_id,
                    "success": result.success,
                },
            )
        logger.info(
            "Tenant provisioning %s finished: tenant=%s success=%s",
            run.transaction_id,
            result.tenant.id,
            result.success,
        )
        return result

    @staticmethod
    def _validate_input(
        data: TenantProvisioningInput, options: ProvisioningOptions
    ) -> None:
        if not data.organization_id and not (data.organization_name or "").strip():
            raise ValidationException(
                "organization_name is required when organization_id is not given",
                field="organization_name",
            )
        admin = data.admin_user
        if options.create_user and admin is not None:
            if not (admin.name and admin.email and admin.password):
                raise ValidationException(
                    "User name, email, and password are required for user creation",
                    field="admin_user",
                )

    # ---- step bookkeeping ----

    def _start_step(self, run: _ProvisioningRun, name: str) -> ProvisioningStep:
        step = run.steps[name]
        step.start()
        logger.info(
            "Provisioning %s step %d/%d started: %s",
            run.transaction_id,
            PROVISIONING_STEPS.index(name) + 1,
            _TOTAL_STEPS,
            name,
        )
        return step

    def _complete_step(
        self, run: _ProvisioningRun, step: ProvisioningStep, details: dict[str, Any]
    ) -> None:
        step.complete(details)
        logger.info(
            "Provisioning %s step %s completed", run.transaction_id, step.name
        )

    def _skip_step(
        self,
        run: _ProvisioningRun,
        name: str,
        reason: SkipReason,
        details: dict[str, Any] | None = None,
    ) -> None:
        run.steps[name].skip(reason, details)
        logger.info(
            "Provisioning %s step %s skipped (%s)",
            run.transaction_id,
            name,
            reason.value,
        )

    def _record_capability(
        self,
        run: _ProvisioningRun,
        step: ProvisioningStep,
        outcome: CapabilityResult,
    ) -> None:
        if outcome.implemented:
            self._complete_step(run, step, outcome.details)
        else:
            step.skip(SkipReason.NOT_IMPLEMENTED, outcome.details)
            logger.info(
                "Provisioning %s step %s skipped (not_implemented)",
                run.transaction_id,
                step.name,
            )

    async def _checkpoint(self, run: _ProvisioningRun) -> None:
        """Commit after a persistence step when not running in one transaction."""
        if not run.options.use_transaction:
            await self.uow.commit()

    # ---- persistence phase (steps 1-7) ----

    async def _run_persistence_phase(self, run: _ProvisioningRun) -> None:
        await self._step_organization(run)
        await self._step_plan(run)
        await self._step_tenant(run)
        await self._step_subscription(run)
        await self._step_admin_role(run)
        await self._step_dropdowns(run)
        await self._step_user(run)

    async def _step_organization(self, run: _ProvisioningRun) -> None:
        step = self._start_step(run, "step_1_organisation")
        data = run.data
        if data.organization_id:
            organization = await self.uow.organizations.get_by_id(data.organization_id)
            if organization is None:
                raise OrganizationNotFoundException(data.organization_id)
            action = "selected"
        else:
            name = data.organization_name.strip()
            if await self.uow.organizations.get_by_name(name) is not None:
                raise DuplicateNameException(name)
            organization = await self.uow.organizations.create_organization(
                name=name, email=data.email, phone=data.phone
            )
            run.saved_records.append(("organization", organization.id))
            action = "created"
        run.organization = organization
        await self._checkpoint(run)
        self._complete_step(
            run,
            step,
            {
                "organisation_id": organization.id,
                "organisation_name": organization.name,
                "action": action,
            },
        )

    async def _step_plan(self, run: _ProvisioningRun) -> None:
        step = self._start_step(run, "step_2_plan")
        if run.data.plan_id:
            plan = await self.uow.plans.get_by_id(run.data.plan_id)
            if plan is None:
                raise PlanNotFoundException(run.data.plan_id)
        else:
            plan = await self.uow.plans.get_or_create_default()
        run.plan = plan
        await self._checkpoint(run)
        self._complete_step(
            run,
            step,
            {"plan_id": plan.id, "plan_name": plan.name, "price": str(plan.price)},
        )

    async def _step_tenant(self, run: _ProvisioningRun) -> None:
        step = self._start_step(run, "step_3_tenant")
        organization, plan = run.organization, run.plan
        plan_start = utc_now()
        existing = None
        if organization.tenant_id:
            existing = await self.uow.tenants.get_by_id(organization.tenant_id)
        if existing is not None:
            tenant = await self.uow.tenants.update_plan(
                existing.id, plan.id, run.data.is_trial, plan_start
            )
            action = "updated"
        else:
            tenant = await self.uow.tenants.create_tenant(
                name=organization.name,
                organization_id=organization.id,
                plan_id=plan.id,
                is_trial=run.data.is_trial,
                plan_start_date=plan_start,
            )
            run.organization = await self.uow.organizations.attach_tenant(
                organization.id, tenant.id
            )
            action = "created"
        run.tenant = tenant
        run.saved_records.append(("tenant", tenant.id))
        await self._checkpoint(run)
        self._complete_step(
            run,
            step,
            {
                "tenant_id": tenant.id,
                "plan_id": tenant.plan_id,
                "is_trial": tenant.is_trial,
                "status": tenant.status.value,
                "action": action,
            },
        )

    async def _step_subscription(self, run: _ProvisioningRun) -> None:
        name = "step_4_subscription"
        if not run.options.create_subscription:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        step = self._start_step(run, name)
        outcome = await self.subscriptions.create_subscription(run.tenant, run.plan)
        await self._checkpoint(run)
        self._record_capability(run, step, outcome)

    async def _step_admin_role(self, run: _ProvisioningRun) -> None:
        step = self._start_step(run, "step_5_client_admin_role")
        role = await self.roles.create_admin_role(run.tenant)
        run.role = role
        await self._checkpoint(run)
        self._complete_step(
            run,
            step,
            {
                "role_id": role.id,
                "role_name": role.name,
                "operations": list(role.operations),
                "persisted": role.persisted,
            },
        )

    async def _step_dropdowns(self, run: _ProvisioningRun) -> None:
        name = "step_6_dropdowns"
        if not run.options.seed_dropdowns:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        step = self._start_step(run, name)
        outcome = await self.dropdowns.seed_defaults(run.tenant)
        await self._checkpoint(run)
        self._record_capability(run, step, outcome)

    async def _step_user(self, run: _ProvisioningRun) -> None:
        name = "step_7_user_creation"
        if not run.options.create_user:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        admin = run.data.admin_user
        if admin is None:
            self._skip_step(
                run, name, SkipReason.NOT_APPLICABLE, {"reason": "no admin user supplied"}
            )
            return
        step = self._start_step(run, name)
        if await self.uow.users.get_by_email(admin.email) is not None:
            raise DuplicateEmailException(admin.email)
        user = await self.uow.users.create_user(
            tenant_id=run.tenant.id,
            name=admin.name,
            email=admin.email,
            password=admin.password,
            role_ids=(run.role.id,),
        )
        run.user = user
        run.saved_records.append(("user", user.id))
        await self._checkpoint(run)
        self._complete_step(
            run,
            step,
            {
                "user_id": user.id,
                "email": user.email,
                "role_ids": list(user.role_ids),
                "identity_provider_id": None,
                "identity_action": None,
            },
        )

    async def _dispatch_saved_records(self, run: _ProvisioningRun) -> None:
        """Emit RECORD_SAVED for rows this run committed."""
        if self.events is None:
            return
        for record_type, record_id in run.saved_records:
            await self.events.dispatch(
                LifecycleEvent.RECORD_SAVED,
                {
                    "record_type": record_type,
                    "record_id": record_id,
                    "tenant_id": run.tenant.id,
                    "transaction_id": run.transaction_id,
                },
            )

    # ---- side-effect phase (steps 8-11) ----

    async def _run_side_effect_phase(self, run: _ProvisioningRun) -> None:
        await self._link_identity(run)
        try:
            await self._step_welcome_email(run)
            await self._step_bucket(run)
            await self._step_saas_notification(run)
        except Exception as e:
            await self.uow.rollback()
            step = run.steps.in_progress()
            run.failed_step = step.name if step else None
            run.error = describe_error(e)
            if step is not None:
                step.fail(e)
            run.steps.abort_remaining()
            logger.exception(
                "Provisioning %s failed at %s after commit; tenant %s kept",
                run.transaction_id,
                run.failed_step,
                run.tenant.id,
            )
            return
        await self._step_audit_log(run)

    async def _link_identity(self, run: _ProvisioningRun) -> None:
        """Find or create the admin's identity-provider account and link it to the user.

        Runs after the commit so a rollback never orphans a provider account.
        The provider is eventually consistent: a rejected create is followed by
        a second lookup, since the account may exist without being searchable
        yet. A failure is recorded on step 7 as a warning and never aborts.
        """
        if run.user is None or not self.identity_provider.enabled:
            return
        admin = run.data.admin_user
        step = run.steps["step_7_user_creation"]
        try:
            identity = await self.identity_provider.get_user_by_email(admin.email)
            action = "linked_existing"
            if identity is None:
                try:
                    identity = await self.identity_provider.create_user(
                        email=admin.email,
                        name=admin.name,
                        password=admin.password,
                        tenant_id=run.tenant.id,
                        role_ids=(run.role.id,),
                    )
                    action = "created"
                except ExternalServiceException as e:
                    logger.warning(
                        "Provisioning %s identity create failed (%s); looking up %s again",
                        run.transaction_id,
                        e.message,
                        admin.email,
                    )
                    identity = await self.identity_provider.get_user_by_email(admin.email)
                    if identity is None:
                        raise
                    action = "linked_after_conflict"
            if identity is None:
                raise ExternalServiceException(
                    "identity_provider", "create_user", "no account returned"
                )
            run.user = await self.uow.users.set_identity_provider_id(
                run.user.id, identity.user_id
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            step.add_details(identity_action="failed", warning=describe_error(e))
            logger.warning(
                "Provisioning %s could not link identity account for user %s: %s",
                run.transaction_id,
                run.user.id,
                e,
            )
            return
        step.add_details(
            identity_provider_id=run.user.identity_provider_id, identity_action=action
        )
        logger.info(
            "Provisioning %s linked user %s to identity account (%s)",
            run.transaction_id,
            run.user.id,
            action,
        )

    async def _step_welcome_email(self, run: _ProvisioningRun) -> None:
        name = "step_8_welcome_email"
        if not run.options.send_welcome_email:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        if run.user is None:
            self._skip_step(
                run, name, SkipReason.NOT_APPLICABLE, {"reason": "no user created"}
            )
            return
        step = self._start_step(run, name)
        outcome = await self.notifications.send_welcome_email(run.user, run.tenant)
        self._record_capability(run, step, outcome)

    async def _step_bucket(self, run: _ProvisioningRun) -> None:
        name = "step_9_s3_bucket"
        if not run.options.create_s3_bucket:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        step = self._start_step(run, name)
        tenant, organization = run.tenant, run.organization
        # A bucket name stored by an earlier run wins over re-derivation.
        bucket_name = tenant.bucket_name or generate_bucket_name(
            self.bucket_prefix, organization.name, tenant.id
        )
        try:
            info = await self.storage.ensure_tenant_bucket(
                bucket_name, tenant.id, organization.name
            )
        except Exception:
            await self._mark_bucket_failed(tenant.id)
            raise
        run.tenant = await self.uow.tenants.attach_bucket(
            tenant.id, info.bucket_name, info.region, BucketStatus.CREATED
        )
        await self.uow.commit()
        run.bucket_info = info
        self._complete_step(
            run,
            step,
            {
                "bucket_name": info.bucket_name,
                "org_slug": info.org_slug,
                "region": info.region,
                "status": info.status,
                "created_at": isoformat_utc(utc_now()),
            },
        )

    async def _mark_bucket_failed(self, tenant_id: str) -> None:
        try:
            await self.uow.tenants.set_bucket_status(tenant_id, BucketStatus.FAILED)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            logger.exception("Could not record failed bucket status for tenant %s", tenant_id)

    async def _step_saas_notification(self, run: _ProvisioningRun) -> None:
        name = "step_10_saas_notification"
        if not run.options.send_saas_notification:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        step = self._start_step(run, name)
        outcome = await self.notifications.notify_new_organization(
            run.organization, run.tenant
        )
        self._record_capability(run, step, outcome)

    async def _step_audit_log(self, run: _ProvisioningRun) -> None:
        name = "step_11_audit_log"
        if not run.options.initialize_audit_log:
            self._skip_step(run, name, SkipReason.DISABLED)
            return
        step = self._start_step(run, name)
        user = run.user
        entry = AuditLogEntryCreate(
            tenant_id=run.tenant.id,
            action=AuditAction.TENANT_PROVISIONING_COMPLETED.value,
            resource_type=AuditResourceType.TENANT.value,
            resource_id=run.tenant.id,
            actor_id=user.id if user else None,
            actor_email=user.email if user else None,
            details={
                "tenant_name": run.organization.name,
                "organisation_id": run.organization.id,
                "transaction_id": run.transaction_id,
                "actor_type": (ActorType.ADMIN if user else ActorType.SYSTEM).value,
                "s3_bucket_created": run.bucket_info is not None,
            },
        )
        try:
            await self.uow.audit_logs.create(entry)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            step.fail(e)
            logger.exception(
                "Provisioning %s audit entry failed (non-fatal)", run.transaction_id
            )
            return
        run.audit_log_initialized = True
        self._complete_step(
            run,
            step,
            {
                "tenant_id": run.tenant.id,
                "audit_log_initialized": True,
                "initial_event": AuditAction.TENANT_PROVISIONING_COMPLETED.value,
            },
        )
