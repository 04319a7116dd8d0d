"""Response envelope helpers."""

from typing import Any

from fastapi.responses import JSONResponse


def success(data: Any = None) -> dict[str, Any]:
    """Build `{"success": true, "data": ...}`; `data` is omitted when None."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    return body


def error_response(
    message: str,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the `{"success": false, "error": ...}` envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )
