"""DTOs for the lifecycle audit log."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    tenant_id: str
    action: str
    resource_type: str
    resource_id: str | None
    actor_id: str | None = None
    actor_email: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model)."""

    id: str
    tenant_id: str
    action: str
    resource_type: str
    resource_id: str | None
    actor_id: str | None
    actor_email: str | None
    details: dict[str, Any]
    timestamp: datetime
