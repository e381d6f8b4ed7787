# socialride/schemas/envelope.py
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from socialride.core.errors import ErrorCode

T = TypeVar("T")


class ErrorInfo(BaseModel):
    error_code: int = int(ErrorCode.NO_ERROR)
    message: str = ""


class ResultData(BaseModel, Generic[T]):
    """
    Uniform response envelope for the /users surface.

    Success: {"data": <payload>, "error": {"error_code": 0, "message": ""}}
    Failure: {"data": {}, "error": {"error_code": <code>, "message": "..."}}
    """

    data: T
    error: ErrorInfo = ErrorInfo()

    @classmethod
    def ok(cls, data: Any) -> "ResultData":
        return cls(data=data)

    @classmethod
    def failure(cls, error_code: int, message: str) -> "ResultData[dict]":
        return ResultData[dict](
            data={},
            error=ErrorInfo(error_code=int(error_code), message=message),
        )
