"""In-memory step tracking for the lifecycle orchestrators.

ProvisioningStepLog holds the ordered eleven-step map returned with a
provisioning result. DeletionLog is the append-only step/error log of one
deletion run. Neither is persisted.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import SkipReason, StepStatus
from app.domain.exceptions import LifecycleException
from app.shared.utils.datetime import isoformat_utc, utc_now

logger = logging.getLogger(__name__)

PROVISIONING_STEPS: tuple[str, ...] = (
    "step_1_organisation",
    "step_2_plan",
    "step_3_tenant",
    "step_4_subscription",
    "step_5_client_admin_role",
    "step_6_dropdowns",
    "step_7_user_creation",
    "step_8_welcome_email",
    "step_9_s3_bucket",
    "step_10_saas_notification",
    "step_11_audit_log",
)
TRANSACTION_COMMIT_STEP = "transaction_commit"


def describe_error(exc: BaseException) -> dict[str, Any]:
    """JSON-safe description of an exception for step details and logs."""
    if isinstance(exc, LifecycleException):
        return {"error": exc.error_code, "message": exc.message}
    return {"error": type(exc).__name__, "message": str(exc)}


@dataclass
class ProvisioningStep:
    """One orchestration step: pending -> in_progress -> completed | failed, or skipped."""

    name: str
    status: StepStatus = StepStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    details: dict[str, Any] | None = None
    skip_reason: SkipReason | None = None

    @property
    def finished(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.SKIPPED)

    def start(self) -> None:
        self.status = StepStatus.IN_PROGRESS
        self.started_at = utc_now()

    def complete(self, details: dict[str, Any] | None = None) -> None:
        self.status = StepStatus.COMPLETED
        self.completed_at = utc_now()
        self.details = details

    def add_details(self, **details: Any) -> None:
        """Merge details into a step that has already finished."""
        self.details = {**(self.details or {}), **details}

    def fail(self, exc: BaseException) -> None:
        self.status = StepStatus.FAILED
        self.completed_at = utc_now()
        self.details = describe_error(exc)

    def skip(self, reason: SkipReason, details: dict[str, Any] | None = None) -> None:
        self.status = StepStatus.SKIPPED
        self.skip_reason = reason
        self.completed_at = utc_now()
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "started_at": isoformat_utc(self.started_at),
            "completed_at": isoformat_utc(self.completed_at),
            "details": self.details,
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
        }


class ProvisioningStepLog:
    """Ordered map of the eleven provisioning steps."""

    def __init__(self, step_names: tuple[str, ...] = PROVISIONING_STEPS) -> None:
        self._steps: dict[str, ProvisioningStep] = {
            name: ProvisioningStep(name=name) for name in step_names
        }

    def __getitem__(self, name: str) -> ProvisioningStep:
        return self._steps[name]

    def in_progress(self) -> ProvisioningStep | None:
        """The step currently running, if any."""
        for step in self._steps.values():
            if step.status == StepStatus.IN_PROGRESS:
                return step
        return None

    def abort_remaining(self) -> list[str]:
        """Mark every still-pending step skipped (aborted); return their names."""
        aborted = []
        for step in self._steps.values():
            if step.status == StepStatus.PENDING:
                step.skip(SkipReason.ABORTED)
                aborted.append(step.name)
        return aborted

    def mark_rolled_back(self) -> list[str]:
        """Flag completed steps whose writes were undone by a rollback."""
        rolled_back = []
        for step in self._steps.values():
            if step.status == StepStatus.COMPLETED:
                step.add_details(rolled_back=True)
                rolled_back.append(step.name)
        return rolled_back

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: step.to_dict() for name, step in self._steps.items()}


@dataclass
class DeletionLog:
    """Append-only step and error log for one deletion run."""

    tenant_id: str
    entries: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)

    def log(self, step: str, **details: Any) -> None:
        self.entries.append(
            {"step": step, "timestamp": isoformat_utc(utc_now()), **details}
        )
        logger.info("[tenant_deletion %s] %s %s", self.tenant_id, step, details or "")

    def log_error(self, step: str, exc: BaseException) -> None:
        self.errors.append(
            {
                "step": step,
                **describe_error(exc),
                "stack": "".join(
                    traceback.format_exception(type(exc), exc, exc.__traceback__)
                ),
                "timestamp": isoformat_utc(utc_now()),
            }
        )
        logger.warning(
            "[tenant_deletion %s] %s failed: %s", self.tenant_id, step, exc
        )
