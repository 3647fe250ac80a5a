from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from schemas.base import CamelModel

T = TypeVar("T")


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    status_code: int = 200
    message: str
    result_data: Optional[T] = None


class ErrorResponse(CamelModel):
    success: bool = False
    status_code: int
    message: str
    error: Optional[Any] = None


def success_response(status_code: int, message: str, result_data: Any = None) -> ApiResponse:
    return ApiResponse(status_code=status_code, message=message, result_data=result_data)


def error_response(status_code: int, message: str, error: Any = None) -> dict[str, Any]:
    body = ErrorResponse(status_code=status_code, message=message, error=error)
    return body.model_dump(by_alias=True, exclude_none=True)
