"""
HTTP routes.

  POST /inference  prompt → generated text
  GET  /health     liveness, independent of backend state
  GET  /status     model availability and diagnostic message

Failures are raised, not returned; the error layer in api.errors turns them
into JSON envelopes.
"""

import logging

from fastapi import APIRouter, Depends, Request

from inference import InferenceCoordinator

from .schemas import ErrorResponse, HealthResponse, InferenceRequest, InferenceResponse, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["inference"])


def get_coordinator(request: Request) -> InferenceCoordinator:
    """Coordinator attached to the running application."""
    return request.app.state.coordinator


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed request body"},
    413: {"model": ErrorResponse, "description": "Request body too large"},
    503: {"model": ErrorResponse, "description": "Model not available"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


@router.post("/inference", response_model=InferenceResponse, responses=ERROR_RESPONSES)
async def inference(
    body: InferenceRequest,
    coordinator: InferenceCoordinator = Depends(get_coordinator),
):
    """Generate a response for the given prompt."""
    text = await coordinator.generate(body.prompt)
    return InferenceResponse(response=text)


@router.get("/health", response_model=HealthResponse)
async def health():
    """Liveness check. Never touches the backend."""
    return HealthResponse()


@router.get("/status", response_model=StatusResponse)
async def status(coordinator: InferenceCoordinator = Depends(get_coordinator)):
    """Model availability, read fresh from the backend."""
    available, message = await coordinator.oracle.status()
    return StatusResponse(available="true" if available else "false", message=message)
