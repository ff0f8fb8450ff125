"""
Infrastructure initialization and bootstrap.

Singleton pattern for creating the model backend and the coordinator
that owns it from configuration.
"""

from typing import Optional

from inference import InferenceCoordinator, ModelBackend

from .config import InfraConfig, get_config


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process, so every route shares
    one backend handle and one serialization lock.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: Optional[InfraConfig] = None):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.llm_backend = self.config.create_llm_backend()
        self.coordinator = InferenceCoordinator(
            self.llm_backend,
            timeout_s=self.config.generation_timeout_s,
        )

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_llm_backend(self) -> ModelBackend:
        """Get LLM backend."""
        return self.llm_backend

    def get_coordinator(self) -> InferenceCoordinator:
        """Get the process-wide inference coordinator."""
        return self.coordinator

    def __repr__(self) -> str:
        """String representation showing configured backend."""
        return (
            f"InfraBootstrap(llm={self.config.llm_backend}, "
            f"timeout={self.config.generation_timeout_s})"
        )


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Args:
        config: Optional custom configuration

    Returns:
        InfraBootstrap instance with all backends initialized
    """
    return InfraBootstrap.get_instance(config)
