"""Error responses shared by the public form endpoints"""

from typing import Iterable

from fastapi.responses import JSONResponse

from app.services.validation import FieldError


def validation_failed(errors: Iterable[FieldError], status_code: int = 400) -> JSONResponse:
    """Field-level errors in the shape the web forms display"""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": "Validation failed",
            "errors": [error.model_dump() for error in errors],
        }
    )
