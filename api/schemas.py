from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class InferenceRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    prompt: str = Field(..., description="Prompt text sent to the model")


class InferenceResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    error: str


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class StatusResponse(BaseModel):
    available: Literal["true", "false"]
    message: str
