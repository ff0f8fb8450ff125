"""
Model boundary layer and inference core.

This package provides a clean abstraction for model invocation, plus the
two pieces that sit on top of it: the availability oracle and the
serializing inference coordinator.

Supported backends:
- StubModelBackend: Deterministic fake model (default for CI/tests)
- OllamaModelBackend: Local Ollama inference

Example usage:
    from inference import InferenceCoordinator, StubModelBackend

    coordinator = InferenceCoordinator(StubModelBackend(response="Hi there!"))
    text = await coordinator.generate("Hello")
"""

from .types import AvailabilityState, GenerationSession, UnavailableReason
from .base import ModelBackend
from .stub import StubModelBackend
from .ollama import OllamaModelBackend, OllamaResponseError
from .errors import (
    InferenceError,
    ServiceError,
    ModelUnavailableError,
    BackendFailureError,
)
from .availability import AvailabilityOracle
from .coordinator import InferenceCoordinator

__all__ = [
    "AvailabilityState",
    "GenerationSession",
    "UnavailableReason",
    "ModelBackend",
    "StubModelBackend",
    "OllamaModelBackend",
    "OllamaResponseError",
    "InferenceError",
    "ServiceError",
    "ModelUnavailableError",
    "BackendFailureError",
    "AvailabilityOracle",
    "InferenceCoordinator",
]
