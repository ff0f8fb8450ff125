from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4


class UnavailableReason(str, Enum):
    """Why the backend cannot serve generations right now."""

    DEVICE_NOT_ELIGIBLE = "device_not_eligible"
    FEATURE_NOT_ENABLED = "feature_not_enabled"
    MODEL_NOT_READY = "model_not_ready"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        # Backends may report reasons this server does not know about yet
        return cls.UNKNOWN


@dataclass(frozen=True)
class AvailabilityState:
    """
    Snapshot of backend readiness.

    Produced fresh by every availability query; never cached.
    """

    available: bool
    reason: Optional[UnavailableReason] = None

    @classmethod
    def ready(cls) -> "AvailabilityState":
        return cls(available=True)

    @classmethod
    def unavailable(cls, reason: Any) -> "AvailabilityState":
        if not isinstance(reason, UnavailableReason):
            reason = UnavailableReason(reason)
        return cls(available=False, reason=reason)


@dataclass
class GenerationSession:
    """
    Per-request handle to the backend.

    Owned by the single call that created it and released when that call
    finishes. Backends may stash whatever they need in ``metadata``.
    """

    session_id: str = field(default_factory=lambda: str(uuid4()))
    metadata: Dict[str, Any] = field(default_factory=dict)
    closed: bool = False
