"""Standard API error envelope."""

from typing import Any, NoReturn

from fastapi import HTTPException, status


def raise_api_error(
    code: str,
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> NoReturn:
    """
    Raise an HTTPException with standardized error format.

    Args:
        code: Machine-readable error code (e.g., "INVALID_DOMAIN")
        message: Human-readable error message naming the corrective action
        status_code: HTTP status code (default: 400)
        details: Optional additional error context
        headers: Optional response headers (e.g., Retry-After)
    """
    raise HTTPException(
        status_code=status_code,
        detail={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
        },
        headers=headers,
    )
