import logging
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from sukejuru.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    SukejuruError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def http_error_from(e: Exception, operation: str) -> HTTPException:
    """
    Translate a service or store failure into the HTTPException a route raises.

    Store errors keep the store's message, as clients display it verbatim.
    """
    if isinstance(e, UpstreamError):
        logger.error(f"{operation} failed upstream: {e.message}")
        return HTTPException(status_code=e.status_code, detail=e.body if e.body is not None else e.message)

    if isinstance(e, SukejuruError):
        logger.info(f"{operation} rejected: {e.message}")
        return HTTPException(
            status_code=_STATUS_BY_ERROR.get(type(e), status.HTTP_400_BAD_REQUEST),
            detail=e.message
        )

    if isinstance(e, SQLAlchemyError):
        logger.error(f"{operation} failed in the store: {e}", exc_info=True)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e.__cause__ or e))

    logger.error(f"{operation} failed: {e}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e) or "Unknown error")
