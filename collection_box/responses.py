"""JSON response types shared by routes, handlers and middleware."""

from fastapi.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def error_response(status_code: int, message: str) -> UTF8JSONResponse:
    return UTF8JSONResponse(status_code=status_code, content={"error": message})


__all__ = ["UTF8JSONResponse", "error_response"]
