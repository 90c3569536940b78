"""
In-flight HTTP exchange.

A PendingResponse is created as soon as a request is dispatched. The exchange
runs as its own asyncio task; headers and body are exposed through separate
awaitables that both resolve from that single task, so either can be awaited
first, from different call sites, without issuing the request twice.
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Optional, Tuple, Union

import httpx  # type: ignore

from azwiki.config.constants.http_status_code import HttpStatusCode
from azwiki.exceptions.wiki_exceptions import WikiApiError, WikiTransportError
from azwiki.sources.client.http.http_request import BodyMode, HTTPRequest
from azwiki.sources.client.http.http_response import HTTPResponse

Body = Union[str, bytes, AsyncIterator[bytes]]


class PendingResponse:
    """Two-part handle over one asynchronous HTTP exchange
    Args:
        exchange: Awaitable producing the httpx response
        request: The request being executed, used for error context
        logger: Optional logger instance
    """

    def __init__(
        self,
        exchange: Awaitable[httpx.Response],
        request: HTTPRequest,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.request = request
        self.operation = request.operation
        self.body_mode = request.body_mode
        self.logger = logger or logging.getLogger(__name__)
        self._stream_consumed = False
        self._task: asyncio.Future = asyncio.ensure_future(self._complete(exchange))

    async def _complete(self, exchange: Awaitable[httpx.Response]) -> httpx.Response:
        try:
            response = await exchange
        except httpx.RequestError as e:
            raise self._transport_error(e) from e

        if not HttpStatusCode.is_success(response.status_code):
            if self.body_mode == BodyMode.STREAM:
                try:
                    await response.aread()
                except httpx.RequestError as e:
                    raise self._transport_error(e) from e
                finally:
                    await response.aclose()
            raise self._api_error(response)
        return response

    def _transport_error(self, error: httpx.RequestError) -> WikiTransportError:
        return WikiTransportError(
            f"{type(error).__name__}: {error}",
            operation=self.operation,
            details={"method": self.request.method, "path": self.request.path()},
        )

    def _api_error(self, response: httpx.Response) -> WikiApiError:
        raw = response.text
        message = None
        type_key = None
        try:
            payload = json.loads(raw) if raw else None
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message")
            type_key = payload.get("typeKey")
        self.logger.warning(
            "%s failed with status %s%s",
            self.operation,
            response.status_code,
            f" ({type_key})" if type_key else "",
        )
        return WikiApiError(
            status_code=response.status_code,
            body=raw,
            operation=self.operation,
            message=message,
            type_key=type_key,
            details={"method": self.request.method, "url": str(response.request.url)},
        )

    async def _response(self) -> httpx.Response:
        # shield so that one cancelled waiter does not abort the exchange for the other
        return await asyncio.shield(self._task)

    def done(self) -> bool:
        return self._task.done()

    async def headers(self) -> httpx.Headers:
        """Response headers once the exchange has completed"""
        response = await self._response()
        return response.headers

    async def status(self) -> int:
        response = await self._response()
        return response.status_code

    async def body(self) -> Body:
        """Response body decoded according to the request's body mode"""
        response = await self._response()
        if self.body_mode == BodyMode.TEXT:
            return response.text
        if self.body_mode == BodyMode.BINARY:
            return response.content
        if self._stream_consumed:
            raise RuntimeError(f"{self.operation}: response stream has already been handed out")
        self._stream_consumed = True
        return self._iter_stream(response)

    async def resolve(self) -> Tuple[httpx.Headers, Body]:
        """Await both parts together"""
        headers = await self.headers()
        body = await self.body()
        return headers, body

    async def response(self) -> HTTPResponse:
        """Completed exchange wrapped as an HTTPResponse (text and binary modes only)"""
        if self.body_mode == BodyMode.STREAM:
            raise RuntimeError(f"{self.operation}: streamed responses must be read through body()")
        return HTTPResponse(await self._response())

    async def aclose(self) -> None:
        """Release the connection of a streamed response that was not fully consumed"""
        if not self._task.done():
            self._task.cancel()
            return
        if self._task.cancelled() or self._task.exception() is not None:
            return
        await self._task.result().aclose()

    async def _iter_stream(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.RequestError as e:
            raise self._transport_error(e) from e
        finally:
            await response.aclose()
