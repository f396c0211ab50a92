from typing import Any, List, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from vidtube.schemas.common import ApiErrorResponse, ApiResponse


def api_response(data: Any = None, message: str = "Success", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    body = ApiResponse(
        status_code=status_code,
        data=jsonable_encoder(data, by_alias=True),
        message=message,
        success=status_code < 400,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def error_response(status_code: int, message: str, errors: Optional[List[Any]] = None) -> JSONResponse:
    body = ApiErrorResponse(status_code=status_code, message=message, errors=jsonable_encoder(errors or []))
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))
