
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.core.exceptions import BaseAPIException, ValidationError

async def custom_exception_handler(request: Request, exc: BaseAPIException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.detail}
    )

async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Report malformed bodies (wrong types, invalid JSON) as 400 validation errors
    with the same shape as the core errors.
    """
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ValidationError.error, "message": "; ".join(messages) or "Invalid request"}
    )
