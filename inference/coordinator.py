"""
Inference coordinator.

Owns the lifecycle of generation sessions:

  lock → availability check → fresh session → backend.generate → text

At most one generation runs against a coordinator at a time; other callers
wait on an asyncio.Lock and are served in arrival order. Only the awaited
backend call suspends, so unrelated requests (health, status) keep flowing.
"""

import asyncio
import logging
from typing import Optional

from .availability import AvailabilityOracle, describe
from .base import ModelBackend
from .errors import BackendFailureError, ModelUnavailableError

logger = logging.getLogger(__name__)


class InferenceCoordinator:
    """Serializes prompt generation against a single model backend."""

    def __init__(
        self,
        backend: ModelBackend,
        oracle: Optional[AvailabilityOracle] = None,
        timeout_s: Optional[float] = None,
    ):
        """
        Args:
            backend: The process-wide model backend
            oracle: Availability oracle (built from backend when omitted, sharing
                the same timeout)
            timeout_s: Upper bound on a single backend call; None disables it
        """
        if timeout_s is not None and timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive or None, got {timeout_s}")
        self.backend = backend
        self.timeout_s = timeout_s
        self.oracle = oracle if oracle is not None else AvailabilityOracle(backend, timeout_s=timeout_s)
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """True while a generation holds the backend."""
        return self._lock.locked()

    async def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: User prompt

        Returns:
            Generated text

        Raises:
            ModelUnavailableError: backend not ready; no session was created
            BackendFailureError: backend call failed, timed out, or returned
                something other than text
        """
        async with self._lock:
            state = await self.oracle.state()
            if not state.available:
                message = describe(state)
                logger.warning(f"Rejecting generation: {message}")
                raise ModelUnavailableError(message)

            async with self.backend.session() as session:
                logger.debug(f"Session {session.session_id} opened ({len(prompt)} chars)")
                try:
                    text = await self._invoke(session, prompt)
                except asyncio.TimeoutError as e:
                    logger.error(f"Generation timed out after {self.timeout_s}s in session {session.session_id}")
                    raise BackendFailureError("generation timed out") from e
                except Exception as e:
                    logger.error(f"Backend failure in session {session.session_id}: {e}", exc_info=True)
                    raise BackendFailureError("backend generation failed") from e

            if not isinstance(text, str):
                logger.error(f"Backend returned {type(text).__name__} instead of text")
                raise BackendFailureError("backend returned malformed output")

            return text

    async def _invoke(self, session, prompt: str):
        call = self.backend.generate(session, prompt)
        if self.timeout_s is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout_s)

    async def aclose(self) -> None:
        await self.backend.aclose()
