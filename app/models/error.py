"""Error response models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned for failed requests."""

    error: str = Field(..., description="Short summary of what failed")
    details: str = Field(..., description="Message of the underlying failure")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    request_id: str | None = Field(default=None, description="Id of the failed request")

    @classmethod
    def from_exception(
        cls, error: str, exc: BaseException, request_id: str | None = None
    ) -> "ErrorResponse":
        return cls(error=error, details=str(exc) or type(exc).__name__, request_id=request_id)
