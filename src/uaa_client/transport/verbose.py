"""Request/response logging for handles created with ``verbose=True``."""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

MASKED_HEADERS = frozenset(["authorization", "cookie", "set-cookie"])


def _masked_headers(headers: httpx.Headers) -> dict[str, str]:
    return {name: "***" if name.lower() in MASKED_HEADERS else value for name, value in headers.items()}


class VerboseLoggingTransport(httpx.AsyncBaseTransport):
    """Transport that logs every request and response at INFO level.

    Credentials in headers are masked; bodies are never logged since token
    requests carry client secrets and passwords.

    Args:
        wrapped_transport: The underlying transport to wrap
    """

    def __init__(self, *, wrapped_transport: httpx.AsyncBaseTransport) -> None:
        self._wrapped_transport = wrapped_transport

    async def __aenter__(self):
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        logger.info(f"REQUEST: {request.method} {request.url} headers={_masked_headers(request.headers)}")
        started = time.monotonic()

        try:
            response = await self._wrapped_transport.handle_async_request(request)
        except Exception as e:
            logger.info(f"RESPONSE: {request.method} {request.url} failed after {time.monotonic() - started:.3f}s: {e}")
            raise

        logger.info(
            f"RESPONSE: {request.method} {request.url} -> {response.status_code} "
            f"in {time.monotonic() - started:.3f}s"
        )
        return response
