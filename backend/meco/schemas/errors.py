from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from meco.core.errors import ErrorCode


class ApiSubError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    object: str
    field: Optional[str] = None
    rejected_value: Any = Field(default=None, alias="rejectedValue")
    message: str


class ApiError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="HTTP status name, e.g. UNAUTHORIZED")
    message: str
    sub_errors: Optional[list[ApiSubError]] = Field(default=None, alias="subErrors")

    @classmethod
    def from_code(
        cls, code: ErrorCode, sub_errors: Optional[list[ApiSubError]] = None
    ) -> "ApiError":
        return cls(status=code.status.name, message=code.message, sub_errors=sub_errors)

    def to_response(self, status_code: int) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=self.model_dump(by_alias=True, exclude_none=True, mode="json"),
        )
