"""
Mapping of domain failures to HTTP responses.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from crewplan.domain.errors import DomainError, ErrorCategory, ErrorCode
from crewplan.domain.results import ActionError
from crewplan.platform.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.ALREADY_RESOLVED: status.HTTP_409_CONFLICT,
    ErrorCategory.INVALID_RESOLUTION: status.HTTP_400_BAD_REQUEST,
}

# Codes that reach the API as ActionResult failures rather than exceptions
STATUS_BY_CODE = {
    ErrorCode.NEW_DATE_REQUIRED.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.ALLOCATION_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT_ALREADY_RESOLVED.value: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_RESOLUTION.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESOLVE_CONFLICT_FAILED.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}},
    )


def action_error_response(error: ActionError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST)
    return error_response(status_code, error.code, error.message)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CATEGORY.get(exc.category, status.HTTP_400_BAD_REQUEST)
    logger.info(
        "Request rejected",
        path=request.url.path,
        code=exc.code,
        status=status_code,
    )
    return error_response(status_code, exc.code, exc.message)
