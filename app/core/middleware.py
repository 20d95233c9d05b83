"""Request correlation and access logging middleware.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import bind_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a request id for the duration of the request and log its outcome.

    The incoming ``X-Request-ID`` header (name configurable) is reused when
    present; otherwise a UUID4 is generated. The id and the handling time are
    echoed on the response as ``X-Request-ID`` and ``X-Request-Duration-ms``.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())

    with bind_request_id(request_id):
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

    response.headers[header_name] = request_id
    response.headers["X-Request-Duration-ms"] = f"{duration_ms:.2f}"
    return response
