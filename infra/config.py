"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
Defaults to the deterministic stub so the server starts anywhere.
"""

import os
from typing import Optional, Literal
from dataclasses import dataclass

from inference import ModelBackend, StubModelBackend, OllamaModelBackend


LLMBackendType = Literal["stub", "ollama"]


def _optional_timeout(raw: str) -> Optional[float]:
    """Parse a timeout in seconds; 0 or negative disables it."""
    value = float(raw)
    return value if value > 0 else None


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    ollama_model: str
    ollama_base_url: str

    # Generation
    generation_timeout_s: Optional[float]

    # Stub backend
    stub_availability: str
    stub_response: str

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Defaults:
        - LLM: stub (available, fixed reply)
        - Generation timeout: 120s
        """
        return cls(
            # LLM Configuration
            llm_backend=os.getenv("LLM_BACKEND", "stub").lower(),  # type: ignore
            ollama_model=os.getenv("OLLAMA_MODEL", "llama3.2"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),

            # Generation
            generation_timeout_s=_optional_timeout(os.getenv("GENERATION_TIMEOUT_S", "120")),

            # Stub Configuration
            stub_availability=os.getenv("STUB_AVAILABILITY", "available").lower(),
            stub_response=os.getenv("STUB_RESPONSE", "This is a stubbed response."),
        )

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "ollama":
            return OllamaModelBackend(
                model_name=self.ollama_model,
                base_url=self.ollama_base_url,
                timeout_s=self.generation_timeout_s,
            )
        else:
            # Default to stub
            reason = None if self.stub_availability == "available" else self.stub_availability
            return StubModelBackend(
                response=self.stub_response,
                unavailable_reason=reason,
            )


def get_config() -> InfraConfig:
    """Get global infrastructure configuration."""
    return InfraConfig.from_env()
