"""Exception handler turning NoteriaException into structured JSON responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import NoteriaException

logger = logging.getLogger(__name__)


async def noteria_exception_handler(request: Request, exc: NoteriaException) -> JSONResponse:
    """Log the error and return ``exc.to_dict()`` with its status code.

    Client errors (4xx) are logged at WARNING. Server errors are logged at
    ERROR with the traceback, which includes any chained driver error.
    """
    server_error = exc.status_code >= 500
    logger.log(
        logging.ERROR if server_error else logging.WARNING,
        f"NoteriaException: {exc.error_code.value}",
        exc_info=exc if server_error else None,
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
