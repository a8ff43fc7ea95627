# vulnscan_api/core/errors.py
import logging
from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


def server_error(message: str, exc: Exception) -> HTTPException:
    """Log a downstream failure and turn it into a 500 carrying the underlying message."""
    logger.error(f"{message}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(exc)},
    )


def not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def bad_request(message: str, **extra) -> HTTPException:
    if extra:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"message": message, **extra})
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
