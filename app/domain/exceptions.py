"""Domain exceptions for tenant lifecycle.

Defines domain-level exceptions that represent business rule violations and
failed collaborator calls. Presentation layer maps them to HTTP responses in
exception handlers using error_code.
"""

from typing import Any


class LifecycleException(Exception):
    """Base exception for all tenant lifecycle errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LifecycleException):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundException(LifecycleException):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        error_code: str = "RESOURCE_NOT_FOUND",
    ) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'tenant', 'plan').
            resource_id: The ID that was not found.
            error_code: Specific code for subclasses.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            error_code,
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class TenantNotFoundException(NotFoundException):
    """Raised when a requested tenant is not found."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__("Tenant", tenant_id, "TENANT_NOT_FOUND")


class PlanNotFoundException(NotFoundException):
    """Raised when an explicitly selected plan does not exist."""

    def __init__(self, plan_id: str) -> None:
        super().__init__("Plan", plan_id, "PLAN_NOT_FOUND")


class OrganizationNotFoundException(NotFoundException):
    """Raised when an explicitly selected organization does not exist."""

    def __init__(self, organization_id: str) -> None:
        super().__init__("Organization", organization_id, "ORGANIZATION_NOT_FOUND")


class DuplicateException(LifecycleException):
    """Raised when a name or email collides with an existing record."""


class DuplicateNameException(DuplicateException):
    """Raised when an organization with the same name already exists."""

    def __init__(self, name: str) -> None:
        """Initialize with the duplicate organization name.

        Args:
            name: The organization name that already exists.
        """
        super().__init__(
            f"Organisation with name '{name}' already exists. Please use a different company name.",
            "DUPLICATE_NAME",
            {"name": name},
        )


class DuplicateEmailException(DuplicateException):
    """Raised when creating a user whose email is already registered."""

    def __init__(self, email: str) -> None:
        super().__init__(
            f"User with email '{email}' already exists.",
            "DUPLICATE_EMAIL",
            {"email": email},
        )


class ActiveUsersExistException(LifecycleException):
    """Raised when deleting a tenant that still has active users (and force is off)."""

    def __init__(self, tenant_id: str, active_users: int) -> None:
        """Initialize with tenant and active user count.

        Args:
            tenant_id: Tenant being deleted.
            active_users: Number of active users found.
        """
        super().__init__(
            f"Cannot delete tenant. {active_users} active user(s) found. "
            "Please deactivate all users first or use forceDelete option.",
            "ACTIVE_USERS_EXIST",
            {"tenant_id": tenant_id, "active_users": active_users},
        )


class PlanLimitExceededException(LifecycleException):
    """Raised when creating a resource would exceed the tenant plan's ceiling."""

    def __init__(
        self,
        tenant_id: str,
        resource: str,
        limit: int | float,
        current: int | float,
        message: str,
    ) -> None:
        super().__init__(
            message,
            "PLAN_LIMIT_EXCEEDED",
            {
                "tenant_id": tenant_id,
                "resource": resource,
                "limit": limit,
                "current": current,
            },
        )


class DatabaseOperationException(LifecycleException):
    """Raised when a persistence call fails."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Database operation failed: {operation}",
            "DATABASE_ERROR",
            {"operation": operation, "reason": reason},
        )


class DatabaseDeletionException(LifecycleException):
    """Raised when the ordered tenant record deletion aborts part-way.

    Carries the per-record-type counts deleted before the failure. Deletions
    already performed are not rolled back.
    """

    def __init__(
        self,
        tenant_id: str,
        failed_record_type: str,
        reason: str,
        counts: dict[str, int],
        deletion_log: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize with the failing record type and counts so far.

        Args:
            tenant_id: Tenant being deleted.
            failed_record_type: Record type whose deletion raised.
            reason: Underlying error message.
            counts: Rows deleted per record type before the failure.
            deletion_log: Step log accumulated by the deletion run, if any.
        """
        super().__init__(
            f"Database deletion failed at {failed_record_type}: {reason}",
            "DATABASE_DELETION_ERROR",
            {
                "tenant_id": tenant_id,
                "failed_record_type": failed_record_type,
                "reason": reason,
                "counts": dict(counts),
                "deletion_log": list(deletion_log or []),
            },
        )
        self.counts = dict(counts)
        self.failed_record_type = failed_record_type


class StorageOperationException(LifecycleException):
    """Raised when an object-storage call fails."""

    def __init__(self, operation: str, bucket_name: str, reason: str) -> None:
        super().__init__(
            f"Storage operation '{operation}' failed for bucket {bucket_name}",
            "STORAGE_ERROR",
            {"operation": operation, "bucket_name": bucket_name, "reason": reason},
        )


class ExternalServiceException(LifecycleException):
    """Raised when an identity-provider (or other external) call fails."""

    def __init__(self, service: str, operation: str, reason: str) -> None:
        super().__init__(
            f"{service} call '{operation}' failed: {reason}",
            "EXTERNAL_SERVICE_ERROR",
            {"service": service, "operation": operation, "reason": reason},
        )


class ProvisioningException(LifecycleException):
    """Raised when tenant provisioning hits an unrecoverable failure.

    Wraps the first failure (available as __cause__ and cause) and carries the
    step map accumulated so far.
    """

    def __init__(
        self,
        cause: Exception,
        failed_step: str,
        steps: dict[str, dict[str, Any]],
        transaction_id: str,
    ) -> None:
        reason = cause.message if isinstance(cause, LifecycleException) else str(cause)
        super().__init__(
            f"Tenant provisioning failed: {reason}",
            "PROVISIONING_FAILED",
            {
                "failed_step": failed_step,
                "cause_error_code": getattr(cause, "error_code", type(cause).__name__),
                "transaction_id": transaction_id,
                "provisioning_steps": steps,
            },
        )
        self.cause = cause
        self.failed_step = failed_step
