"""Thin async JSON client for the finance REST API.

Every failure leaves this module as a NetworkError subclass (see
network.errors). Requests are never retried.
"""
import json
import logging
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic_core import PydanticSerializationError

from network.errors import (
    DecodeError,
    EncodeError,
    NoConnectivityError,
    ServerError,
    UnauthorizedError,
    UnknownNetworkError,
)
from utils.constants import REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _is_no_connectivity(exc: Exception) -> bool:
    return isinstance(exc, (httpx.TimeoutException, httpx.NetworkError))


class NetworkClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NetworkClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: BaseModel | None = None,
        response_type: Any = None,
    ) -> Any:
        """Send one request and decode the reply into response_type.

        response_type=None means the caller expects an empty body; any 2xx
        then succeeds and returns None. Otherwise a 204 is a DecodeError.
        """
        content = self._encode(body) if body is not None else None

        try:
            response = await self._client.request(
                method, path.lstrip("/"), params=params, content=content
            )
        except httpx.HTTPError as exc:
            if _is_no_connectivity(exc):
                logger.info("%s %s: no connectivity (%s)", method, path, type(exc).__name__)
                raise NoConnectivityError() from exc
            logger.warning("%s %s failed: %s", method, path, exc)
            raise UnknownNetworkError(exc) from exc

        status = response.status_code
        if 200 <= status < 300:
            pass
        elif status == 401:
            raise UnauthorizedError()
        elif 400 <= status < 600:
            logger.warning("%s %s returned %d", method, path, status)
            raise ServerError(status)
        else:
            raise UnknownNetworkError(message=f"Unexpected response status {status}.")

        if response_type is None:
            return None
        if status == 204:
            raise DecodeError("Server returned no content where data was expected.")

        try:
            return TypeAdapter(response_type).validate_python(response.json())
        except ValueError as exc:
            logger.warning("%s %s: undecodable response: %s", method, path, exc)
            raise DecodeError() from exc

    @staticmethod
    def _encode(body: BaseModel) -> bytes:
        try:
            return json.dumps(body.model_dump(mode="json", by_alias=True)).encode("utf-8")
        except (TypeError, ValueError, PydanticSerializationError) as exc:
            raise EncodeError() from exc
