import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("roster")

REQUEST_ID_HEADER = "X-Request-ID"


def _decode_body(body: bytes):
    if not body:
        return None
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return str(body)
    try:
        return json.loads(text)
    except ValueError:
        return text


async def _drain(response: Response) -> bytes:
    """Read a streamed response body and put it back for the client."""
    body = b"".join([chunk async for chunk in response.body_iterator])

    async def replay():
        yield body

    response.body_iterator = replay()
    return body


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        request_body = _decode_body(await request.body())
        response = await call_next(request)
        response_body = _decode_body(await _drain(response))

        logger.info(
            json.dumps(
                {
                    "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()),
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "request_body": request_body,
                    "response_body": response_body,
                },
                default=str,
            )
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
