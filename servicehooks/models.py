"""Per-request values passed between parser, dispatcher and reporter."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class InboundEvent(BaseModel):
    """Normalized inbound hook request."""

    model_config = ConfigDict(frozen=True)

    event_name: str
    data: Dict[str, Any] = Field(default_factory=dict)
    payload: Dict[str, Any] = Field(default_factory=dict)


class DispatchOutcome(BaseModel):
    """Final HTTP status and text body for one request."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str


class ExceptionReport(BaseModel):
    """Failure details sent to the diagnostics collector.

    Field aliases are the collector's wire names.
    """

    model_config = ConfigDict(populate_by_name=True)

    app: str
    type: str = "exception"
    error_class: str = Field(serialization_alias="class")
    server: str
    message: str
    backtrace: str
    rollup: str
    service: str
    service_data: str | None = None
    event: str | None = None
    payload: str | None = None
    duration: str | None = None

    def to_wire(self) -> Dict[str, Any]:
        """Return the report as the collector expects it (aliases, no unset fields)."""
        return self.model_dump(by_alias=True, exclude_none=True)
