from typing import Any, Optional

from .base import ModelBackend
from .types import AvailabilityState, GenerationSession, UnavailableReason


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    This backend is fast, deterministic, and never fails silently.
    Used as the default backend for all CI/test environments.
    """

    def __init__(
        self,
        response: str = "This is a stubbed response.",
        unavailable_reason: Optional[Any] = None,
        error: Optional[Exception] = None,
    ):
        """
        Args:
            response: Text returned for every prompt
            unavailable_reason: When set, the stub reports itself unavailable
                for this reason (an UnavailableReason or its string value)
            error: When set, generate() raises this instead of answering
        """
        self.response = response
        self.unavailable_reason = unavailable_reason
        self.error = error
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.prompts: list = []

    def set_unavailable(self, reason: Any = UnavailableReason.UNKNOWN) -> None:
        self.unavailable_reason = reason

    def set_available(self) -> None:
        self.unavailable_reason = None

    async def availability(self) -> AvailabilityState:
        if self.unavailable_reason is None:
            return AvailabilityState.ready()
        return AvailabilityState.unavailable(self.unavailable_reason)

    async def create_session(self) -> GenerationSession:
        self.sessions_opened += 1
        return GenerationSession(metadata={"backend": "stub"})

    async def close_session(self, session: GenerationSession) -> None:
        await super().close_session(session)
        self.sessions_closed += 1

    async def generate(self, session: GenerationSession, prompt: str) -> str:
        """
        Return the configured response, or raise the configured error.

        Args:
            session: Session opened for this request
            prompt: User prompt

        Returns:
            The configured response text
        """
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response
