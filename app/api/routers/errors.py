"""
app/api/routers/errors.py

Service exception to HTTP error translation shared by the routers.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.services.dataset_cache import DatasetLoadError
from app.validators.mapping_validator import ColumnMappingError

logger = logging.getLogger(__name__)

# UnknownDimensionError and InvalidPeriodError are ValueError subclasses.
SERVICE_ERRORS: tuple[type[Exception], ...] = (DatasetLoadError, ValueError)


def to_http_error(exc: DatasetLoadError | ValueError) -> HTTPException:
    """
    Map a service exception to the matching ``HTTPException``.

    Bad request parameters become 400; an unavailable dataset becomes 503.
    """

    if isinstance(exc, DatasetLoadError):
        logger.error("Dataset unavailable: %s", exc)
        cause = exc.__cause__
        if isinstance(cause, ColumnMappingError):
            return HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=cause.to_dict(),
            )
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(exc)},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
