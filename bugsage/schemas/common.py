"""Response envelope shared by every endpoint."""

from pydantic import BaseModel, Field


class Envelope(BaseModel):
    """Uniform wrapper: success flag plus a human-readable message; data fields are added by subclasses."""

    success: bool = Field(default=True, description="False only on failure responses")
    message: str = Field(default="Success", description="Human-readable outcome")


class ErrorEnvelope(Envelope):
    """Body of every non-2xx response."""

    success: bool = False


class IdRequest(BaseModel):
    """Body for endpoints that act on a single row by id (e.g. DELETE /bugs)."""

    id: int = Field(default=0, description="Row id; 0 or missing is rejected")
