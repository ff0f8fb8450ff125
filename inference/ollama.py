import logging
from typing import Any, Dict, Optional

import httpx

from .base import ModelBackend
from .types import AvailabilityState, GenerationSession, UnavailableReason

logger = logging.getLogger(__name__)


class OllamaResponseError(RuntimeError):
    """Ollama answered, but not with a usable chat completion."""
    pass


class OllamaModelBackend(ModelBackend):
    """
    Ollama backend for local model inference.

    Availability comes from /api/tags (is the model pulled?), generation
    from /api/chat with streaming disabled. Each session is a plain record;
    Ollama itself keeps no per-conversation state between calls.
    """

    def __init__(
        self,
        model_name: str,
        base_url: str = "http://localhost:11434",
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Ollama backend.

        Args:
            model_name: Name of the model (e.g. "llama3.2", "phi3:mini")
            base_url:   Base URL of the Ollama service
            timeout_s:  Transport timeout for a single HTTP call (None = no limit)
            client:     Pre-built httpx client (tests inject a mock transport here)
        """
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_s),
        )

    def _model_matches(self, name: str) -> bool:
        # "llama3.2" is listed by Ollama as "llama3.2:latest"
        if name == self.model_name:
            return True
        return ":" not in self.model_name and name == f"{self.model_name}:latest"

    async def availability(self) -> AvailabilityState:
        """
        Query Ollama for the installed models.

        Returns:
            ready() when the configured model is installed,
            MODEL_NOT_READY when the server is up but the model is missing,
            FEATURE_NOT_ENABLED when nothing is listening,
            UNKNOWN for anything else
        """
        try:
            resp = await self._client.get("/api/tags")
            resp.raise_for_status()
            models = resp.json().get("models", [])
        except httpx.ConnectError:
            return AvailabilityState.unavailable(UnavailableReason.FEATURE_NOT_ENABLED)
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Ollama availability query failed: {e}")
            return AvailabilityState.unavailable(UnavailableReason.UNKNOWN)

        names = [m.get("name") or m.get("model") or "" for m in models if isinstance(m, dict)]
        if any(self._model_matches(name) for name in names):
            return AvailabilityState.ready()
        return AvailabilityState.unavailable(UnavailableReason.MODEL_NOT_READY)

    async def create_session(self) -> GenerationSession:
        return GenerationSession(metadata={"backend": "ollama", "model": self.model_name})

    async def generate(self, session: GenerationSession, prompt: str) -> str:
        """
        Generate a response using Ollama /api/chat.

        Args:
            session: Session opened for this request
            prompt: User prompt, sent as a single user message

        Returns:
            The assistant message content

        Raises:
            httpx.HTTPError: transport failure or non-2xx status
            OllamaResponseError: body is not a chat completion
        """
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }

        resp = await self._client.post("/api/chat", json=payload)
        resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError as e:
            raise OllamaResponseError("Ollama returned a non-JSON body") from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise OllamaResponseError("Ollama response has no message content")

        session.metadata["done_reason"] = data.get("done_reason")
        return content

    async def aclose(self) -> None:
        await self._client.aclose()
