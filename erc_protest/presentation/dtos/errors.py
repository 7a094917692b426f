"""Error response helpers."""
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


def create_validation_error_response(validation_error: RequestValidationError) -> JSONResponse:
    """Convert a request validation error to the standard 400 response."""
    errors = []
    for error in validation_error.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        error_msg = error["msg"]
        if error["type"] == "missing":
            error_msg = f"{field} is required"
        elif error["type"] == "string_too_short":
            error_msg = f"{field} must be a non-empty string"
        elif error["type"] == "extra_forbidden":
            error_msg = f"unexpected field '{field}'"
        errors.append({"field": field, "error": error_msg})

    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid request",
            "errors": errors,
        },
    )


def create_internal_error_response() -> JSONResponse:
    """Create standardized internal error response."""
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal error",
            "errors": [],
        },
    )
