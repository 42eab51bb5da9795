from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from changemakers_api.core.exceptions import AppError

_MISSING = object()


def success_response(
        data: Any = _MISSING,
        *,
        message: Optional[str] = None,
        inserted_id: Optional[str] = None,
        status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Wraps a result as ``{success: true, message?, data?, insertedId?}``.

    ``data`` is kept even when it is None or empty, so a missing creator
    or an empty member list still reaches the client.
    """
    content: dict[str, Any] = {"success": True}
    if message is not None:
        content["message"] = message
    if data is not _MISSING:
        content["data"] = data
    if inserted_id is not None:
        content["insertedId"] = inserted_id
    return JSONResponse(content=jsonable_encoder(content), status_code=status_code)


def error_response(exc: AppError) -> JSONResponse:
    content = {"success": False, "message": exc.message, "error": exc.error}
    return JSONResponse(content=content, status_code=exc.status_code)
