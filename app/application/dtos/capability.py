"""Result of calling an optional collaborator capability."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CapabilityResult:
    """Outcome of a capability call.

    implemented is False when the collaborator is a placeholder; the
    orchestrator reports such steps as skipped (not_implemented) rather than
    completed.
    """

    implemented: bool
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def not_implemented(cls, capability: str, **details: Any) -> "CapabilityResult":
        return cls(implemented=False, details={"capability": capability, **details})
