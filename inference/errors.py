"""
Inference error taxonomy.

ServiceError subclasses carry a status code and a reason that is safe to
show to clients. Everything else is flattened to a generic 500 at the
HTTP boundary.
"""


class InferenceError(Exception):
    """Base class for failures raised while serving a generation."""
    pass


class ServiceError(InferenceError):
    """User-facing failure: the reason is returned to the client verbatim."""

    status_code: int = 500

    def __init__(self, reason: str, status_code: int = None):
        super().__init__(reason)
        self.reason = reason
        if status_code is not None:
            self.status_code = status_code


class ModelUnavailableError(ServiceError):
    """The backend is not ready to serve (recoverable by waiting)."""

    status_code = 503


class BackendFailureError(InferenceError):
    """
    The backend failed while generating.

    The underlying exception is chained as ``__cause__`` and is only
    logged server-side.
    """
    pass
