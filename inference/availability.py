"""
Availability oracle.

Single place that turns backend readiness into a boolean and a
human-readable diagnostic, so /status and the generation path always
agree on wording.
"""

import asyncio
import logging
from typing import Optional, Tuple

from .base import ModelBackend
from .types import AvailabilityState, UnavailableReason

logger = logging.getLogger(__name__)

AVAILABLE_MESSAGE = "Model is available"
FALLBACK_MESSAGE = "Model availability unknown"

REASON_MESSAGES = {
    UnavailableReason.DEVICE_NOT_ELIGIBLE: "Device is not eligible for on-device generation",
    UnavailableReason.FEATURE_NOT_ENABLED: "On-device generation is not enabled in settings",
    UnavailableReason.MODEL_NOT_READY: "Model is downloading or not ready yet",
    UnavailableReason.UNKNOWN: "Model is unavailable for unknown reason",
}


def describe(state: AvailabilityState) -> str:
    """Map an availability state to its diagnostic message. Never raises."""
    if state.available:
        return AVAILABLE_MESSAGE
    return REASON_MESSAGES.get(state.reason, FALLBACK_MESSAGE)


class AvailabilityOracle:
    """
    Read-only view of backend readiness.

    Every call queries the backend again; nothing is cached because the
    model can finish downloading or be switched off at any time.
    """

    def __init__(self, backend: ModelBackend, timeout_s: Optional[float] = None):
        """
        Args:
            backend: The model backend to query
            timeout_s: Upper bound on one availability query; None disables it
        """
        if timeout_s is not None and timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive or None, got {timeout_s}")
        self.backend = backend
        self.timeout_s = timeout_s

    async def state(self) -> AvailabilityState:
        """Query the backend, degrading failures and timeouts to UNKNOWN."""
        try:
            if self.timeout_s is None:
                return await self.backend.availability()
            return await asyncio.wait_for(self.backend.availability(), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.error(f"Availability query timed out after {self.timeout_s}s")
            return AvailabilityState.unavailable(UnavailableReason.UNKNOWN)
        except Exception as e:
            logger.error(f"Availability query failed: {e}", exc_info=True)
            return AvailabilityState.unavailable(UnavailableReason.UNKNOWN)

    async def is_available(self) -> bool:
        return (await self.state()).available

    async def diagnostic_message(self) -> str:
        return describe(await self.state())

    async def status(self) -> Tuple[bool, str]:
        """Availability flag and message taken from the same backend read."""
        state = await self.state()
        return state.available, describe(state)
