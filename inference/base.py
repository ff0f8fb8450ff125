from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .types import AvailabilityState, GenerationSession


class ModelBackend(ABC):
    """
    Abstract model boundary.
    Server code must depend ONLY on this interface.
    """

    @abstractmethod
    async def availability(self) -> AvailabilityState:
        """Report whether the model can serve a generation right now."""
        raise NotImplementedError

    @abstractmethod
    async def create_session(self) -> GenerationSession:
        """Open a fresh session for a single request."""
        raise NotImplementedError

    @abstractmethod
    async def generate(self, session: GenerationSession, prompt: str) -> str:
        """Generate text for ``prompt`` within ``session``."""
        raise NotImplementedError

    async def close_session(self, session: GenerationSession) -> None:
        """Release a session. Default just marks it closed."""
        session.closed = True

    async def aclose(self) -> None:
        """Release process-wide resources held by the backend."""
        return None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[GenerationSession]:
        """
        Scoped session acquisition.

        The session is released on every exit path: normal return,
        backend error, timeout or task cancellation.
        """
        session = await self.create_session()
        try:
            yield session
        finally:
            await self.close_session(session)
