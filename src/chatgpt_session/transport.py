from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import httpx
from loguru import logger

from chatgpt_session.errors import TransportError

_ERROR_BODY_CHARS = 500


class HttpTransport:
    """Plain JSON and server-sent-event exchanges over one ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        user_agent: str,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        merged = {"user-agent": self._user_agent}
        if headers:
            merged.update(headers)
        return merged

    async def get_json(self, url: str, *, headers: dict[str, str] | None = None) -> Any:
        logger.debug(f"GET {url}")
        response = await self._client.get(url, headers=self._headers(headers))
        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
                body=response.text[:_ERROR_BODY_CHARS],
            )
        return response.json()

    async def stream_events(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> AsyncIterator[str]:
        """POST ``json_body`` and yield the data payload of every server-sent event."""
        request_headers = self._headers(headers)
        request_headers.setdefault("accept", "text/event-stream")
        logger.debug(f"POST {url} (event stream)")
        async with self._client.stream("POST", url, headers=request_headers, json=json_body) as response:
            if response.status_code >= 400:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise TransportError(
                    f"HTTP {response.status_code} from {url}",
                    status_code=response.status_code,
                    body=body[:_ERROR_BODY_CHARS],
                )
            async for data in iter_sse_data(response.aiter_lines()):
                yield data


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Group SSE lines into events and yield each event's joined ``data`` field."""
    data_lines: list[str] = []
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if name != "data":
            # event/id/retry fields carry nothing this client uses
            continue
        if value.startswith(" "):
            value = value[1:]
        data_lines.append(value)
    if data_lines:
        yield "\n".join(data_lines)
