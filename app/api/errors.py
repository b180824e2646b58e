"""Maps service errors to HTTP responses"""
import logging
from typing import Dict, Type

from fastapi import HTTPException

from service.errors import (
    DependencyError, InvalidVideoUrlError, ServiceError, VideoAlreadyExistsError, VideoNotFoundError
)

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[Type[ServiceError], int] = {
    InvalidVideoUrlError: 400,
    VideoNotFoundError: 404,
    VideoAlreadyExistsError: 409,
    DependencyError: 503,
}


def http_error(status_code: int, code: str, message: str, trace_id: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "trace_id": trace_id
            }
        }
    )


def from_service_error(e: ServiceError, trace_id: str) -> HTTPException:
    status_code = STATUS_CODES.get(type(e), 400)
    log = logger.error if status_code >= 500 else logger.warning
    log("Service error", extra={
        "trace_id": trace_id,
        "error_code": e.code,
        "error_message": e.message
    })
    return http_error(status_code, e.code, e.message, trace_id)


def internal_error(e: Exception, trace_id: str) -> HTTPException:
    logger.error(f"Unexpected error: {type(e).__name__}: {e}", extra={"trace_id": trace_id})
    return http_error(500, "INTERNAL_ERROR", "Internal server error", trace_id)
