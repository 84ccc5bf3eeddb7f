"""
Unified response envelope.

Every endpoint answers with ``{success, code, message, data, error}``;
``data`` carries the entity payload on success, ``error`` the details on
failure.
"""
from typing import Any, Optional, Generic, TypeVar
from pydantic import BaseModel, Field, field_serializer
from datetime import datetime, timezone
from shared.codes import BusinessCode


T = TypeVar("T")


class ErrorDetail(BaseModel):
    """Error details"""
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        """Serialize as UTC ISO8601 with a trailing Z."""
        ts = timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        else:
            ts = ts.astimezone(timezone.utc)
        s = ts.isoformat()
        return s.replace("+00:00", "Z")


class Response(BaseModel, Generic[T]):
    """Response envelope"""
    success: bool = True
    code: int = BusinessCode.SUCCESS
    message: str = "Success"
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None


def success_response(
    data: Any = None,
    message: str = "Success",
    code: int = BusinessCode.SUCCESS
) -> Response:
    """
    Build a success envelope.

    Args:
        data: payload (DTOs are serialized by alias by the caller)
        message: human readable message
        code: business code
    """
    return Response(
        success=True,
        code=code,
        message=message,
        data=data,
        error=None
    )


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None
) -> Response:
    """
    Build an error envelope.

    Args:
        code: business code
        message: human readable message
        error_type: exception type name exposed to clients
        details: structured context
        field: offending request field, if any
        request_id: correlation id
    """
    return Response(
        success=False,
        code=code,
        message=message,
        data=None,
        error=ErrorDetail(
            type=error_type,
            details=details,
            field=field,
            request_id=request_id
        )
    )
