import logging
import time
import uuid

from fastapi import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    """One log line per request, tagged with a request id echoed back to the caller."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    started = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            f"request_failed id={request_id} method={request.method} path={request.url.path}"
        )
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"request id={request_id} method={request.method} path={request.url.path} "
        f"status={response.status_code} duration_ms={elapsed_ms:.1f}"
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
