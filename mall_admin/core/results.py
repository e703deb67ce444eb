from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mall_admin.core.errors import ActionError, ErrorCode, HTTP_STATUS


class ActionResult(BaseModel):
    """Tagged outcome of a mutation: {success, data, message} or {success, error, code}."""

    success: bool
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ActionResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str, code: Optional[ErrorCode] = None) -> "ActionResult":
        return cls(success=False, error=error, code=code)

    @classmethod
    def from_error(cls, exc: ActionError) -> "ActionResult":
        return cls.fail(exc.message, exc.code)

    def to_dict(self) -> dict:
        if self.success:
            body = {"success": True, "data": jsonable_encoder(self.data)}
            if self.message is not None:
                body["message"] = self.message
            return body
        body = {"success": False, "error": self.error}
        if self.code is not None:
            body["code"] = self.code.value
        return body


def respond(result: ActionResult, status_code: int = 200) -> JSONResponse:
    if not result.success:
        status_code = HTTP_STATUS.get(result.code, 400) if result.code else 400
    return JSONResponse(status_code=status_code, content=result.to_dict())
