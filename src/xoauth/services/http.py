"""HTTP request building and execution.

Turns (method, endpoint, data, headers) into a resolved HttpRequest, sends
it through an ``httpx.AsyncClient`` and classifies the response: JSON body
on 2xx, RateLimitedError on 429, ProviderHttpError on anything else.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin

import httpx

from xoauth.models.errors import (
    InvalidResponseError,
    NetworkError,
    ProviderHttpError,
    RateLimitedError,
)
from xoauth.models.http import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    BodyEncoding,
    HttpRequest,
)

logger = logging.getLogger(__name__)

_ERROR_MESSAGE_KEYS = ("error_description", "error", "detail", "title", "message")


def _content_type(headers: dict[str, str]) -> str | None:
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def build_request(
    method: str,
    endpoint: str,
    base_url: str,
    data: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> HttpRequest:
    """Resolve an endpoint against the API base URL and pick a body encoding.

    GET requests carry ``data`` as query parameters, merged with any query
    already present on the endpoint. Other methods send it
    form-encoded when the caller asked for
    ``application/x-www-form-urlencoded`` and as JSON otherwise.
    """
    method = method.upper()
    data = dict(data or {})
    headers = dict(headers or {})
    url = urljoin(base_url, endpoint)

    if method == "GET":
        return HttpRequest(method=method, url=url, headers=headers, params=data)

    content_type = _content_type(headers)
    if content_type and content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE:
        encoding = BodyEncoding.FORM
    else:
        encoding = BodyEncoding.JSON
        if content_type is None:
            headers["Content-Type"] = JSON_CONTENT_TYPE

    return HttpRequest(
        method=method, url=url, headers=headers, data=data, encoding=encoding
    )


class RequestExecutor:
    """Sends HttpRequests and turns responses into data or errors.

    The executor does not own retries or authentication; it performs one
    request per call.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http_client = http_client

    async def send(self, request: HttpRequest) -> httpx.Response:
        """Put a request on the wire and return the raw response.

        Raises:
            NetworkError: If the transport fails
        """
        logger.debug(f"Sending {request.method} {request.url}")

        kwargs: dict[str, Any] = {"headers": request.headers}
        if request.params:
            kwargs["params"] = request.params
        if request.encoding is BodyEncoding.JSON:
            kwargs["json"] = request.data
        elif request.encoding is BodyEncoding.FORM:
            kwargs["data"] = request.data

        try:
            return await self._http_client.request(
                request.method, request.url, **kwargs
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                f"HTTP error during {request.method} {request.url}: {e}"
            ) from e

    def parse(self, response: httpx.Response) -> Any:
        """Return the JSON body of a 2xx response.

        Raises:
            RateLimitedError: On 429
            ProviderHttpError: On any other non-2xx status
            InvalidResponseError: If a 2xx body is not valid JSON
        """
        status = response.status_code

        if status == 429:
            logger.warning("Rate limit exceeded")
            raise RateLimitedError(status)

        if not 200 <= status < 300:
            message = self._error_message(response)
            logger.warning(f"Provider returned {status}: {message}")
            raise ProviderHttpError(
                status, f"HTTP error! status: {status}, message: {message}"
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(f"Invalid JSON response: {e}") from e

    async def execute(self, request: HttpRequest) -> Any:
        """Send a request and parse its response."""
        response = await self.send(request)
        return self.parse(response)

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            for key in _ERROR_MESSAGE_KEYS:
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value

        return response.reason_phrase or "Unknown error"
