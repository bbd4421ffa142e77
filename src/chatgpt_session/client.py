from __future__ import annotations

import json
import time
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any
from uuid import uuid4

import httpx
from loguru import logger

from chatgpt_session.callbacks import notify
from chatgpt_session.conversation import Conversation
from chatgpt_session.errors import (
    AuthenticationError,
    ChatGPTError,
    IncompleteStreamError,
    InvalidSessionTokenError,
    SessionExpiredError,
    StreamParseError,
)
from chatgpt_session.expiry_cache import ExpiryCache
from chatgpt_session.markdown_text import markdown_to_text
from chatgpt_session.models import ConversationResponseEvent, SessionResult
from chatgpt_session.transport import HttpTransport

DEFAULT_API_BASE_URL = "https://chat.openai.com/api"
DEFAULT_BACKEND_API_BASE_URL = "https://chat.openai.com/backend-api"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/107.0.0.0 Safari/537.36"
)
DEFAULT_ACCESS_TOKEN_TTL_SECONDS = 10.0
DEFAULT_MODEL = "text-davinci-002-render"

KEY_ACCESS_TOKEN = "accessToken"
SESSION_COOKIE_NAME = "__Secure-next-auth.session-token"
STREAM_DONE = "[DONE]"

_REFRESH_ERROR_CODE = "RefreshAccessTokenError"
_AUTH_ERROR_PREFIX = "ChatGPT failed to refresh auth token."

ProgressCallback = Callable[[str], Any]
EventCallback = Callable[[ConversationResponseEvent], Any]


class ChatGPTAPI:
    """Client for the unofficial ChatGPT web API.

    A long-lived session token (the ``__Secure-next-auth.session-token`` cookie of
    a logged-in browser session) is exchanged for short-lived access tokens, which
    are cached for ``access_token_ttl`` seconds and used as bearer tokens on the
    streamed conversation endpoint.
    """

    def __init__(
        self,
        session_token: str,
        *,
        markdown: bool = True,
        api_base_url: str = DEFAULT_API_BASE_URL,
        backend_api_base_url: str = DEFAULT_BACKEND_API_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        access_token_ttl: float = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
        timeout: float = 120.0,
        transport: HttpTransport | None = None,
        token_cache: ExpiryCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not session_token:
            raise InvalidSessionTokenError()

        self._session_token = session_token
        self._markdown = bool(markdown)
        self._api_base_url = api_base_url.rstrip("/")
        self._backend_api_base_url = backend_api_base_url.rstrip("/")
        self._user_agent = user_agent
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport(user_agent=user_agent, timeout=timeout)
        self._access_token_cache = token_cache or ExpiryCache(access_token_ttl, clock=clock)

    @property
    def markdown(self) -> bool:
        return self._markdown

    async def __aenter__(self) -> ChatGPTAPI:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    async def get_is_authenticated(self) -> bool:
        try:
            await self.refresh_access_token()
            return True
        except AuthenticationError as ex:
            logger.debug(f"Authentication probe failed: {ex}")
            return False

    async def ensure_auth(self) -> str:
        return await self.refresh_access_token()

    async def refresh_access_token(self) -> str:
        cached = self._access_token_cache.get(KEY_ACCESS_TOKEN)
        if cached:
            logger.debug("Using cached access token")
            return cached

        url = f"{self._api_base_url}/auth/session"
        try:
            data = await self._transport.get_json(
                url,
                headers={"cookie": f"{SESSION_COOKIE_NAME}={self._session_token}"},
            )
        except (httpx.HTTPError, ChatGPTError, ValueError) as ex:
            logger.error(f"Access token refresh failed: {ex}")
            raise AuthenticationError(f"{_AUTH_ERROR_PREFIX} {ex}") from ex

        result = SessionResult.from_dict(data)
        if result.error == _REFRESH_ERROR_CODE:
            logger.error("Access token refresh failed: session token has expired")
            raise SessionExpiredError(
                f"{_AUTH_ERROR_PREFIX} session token has expired",
                error_code=result.error,
            )
        if result.error:
            logger.error(f"Access token refresh failed: {result.error}")
            raise AuthenticationError(f"{_AUTH_ERROR_PREFIX} {result.error}", error_code=result.error)
        if not result.access_token:
            logger.error("Access token refresh failed: no access token in session response")
            raise AuthenticationError(f"{_AUTH_ERROR_PREFIX} Unauthorized")

        self._access_token_cache.set(KEY_ACCESS_TOKEN, result.access_token)
        logger.debug("Refreshed access token")
        return result.access_token

    def build_conversation_body(
        self,
        message: str,
        *,
        conversation_id: str | None = None,
        parent_message_id: str | None = None,
        message_id: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "action": "next",
            "messages": [
                {
                    "id": message_id or str(uuid4()),
                    "role": "user",
                    "content": {
                        "content_type": "text",
                        "parts": [message],
                    },
                }
            ],
            "model": DEFAULT_MODEL,
            "parent_message_id": parent_message_id or str(uuid4()),
        }
        if conversation_id:
            body["conversation_id"] = conversation_id
        return body

    async def stream_conversation(
        self,
        message: str,
        *,
        conversation_id: str | None = None,
        parent_message_id: str | None = None,
    ) -> AsyncIterator[ConversationResponseEvent]:
        """Send one user turn and yield every parsed conversation event.

        The sequence ends when the ``[DONE]`` sentinel arrives. Raises
        ``StreamParseError`` on a malformed payload and ``IncompleteStreamError``
        if the stream closes without the sentinel.
        """
        access_token = await self.refresh_access_token()

        body = self.build_conversation_body(
            message,
            conversation_id=conversation_id,
            parent_message_id=parent_message_id,
        )
        url = f"{self._backend_api_base_url}/conversation"
        logger.debug(
            f"Conversation request: conversation_id={conversation_id}, "
            f"parent_message_id={body['parent_message_id']}"
        )

        events = self._transport.stream_events(
            url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            json_body=body,
        )
        event_count = 0
        async with aclosing(events):
            async for data in events:
                if data == STREAM_DONE:
                    logger.debug(f"Conversation stream complete after {event_count} events")
                    return
                try:
                    event = ConversationResponseEvent.from_dict(json.loads(data))
                except ValueError as ex:
                    logger.warning(f"Unparseable conversation event: {data[:80]!r}")
                    raise StreamParseError(f"Failed to parse conversation event: {ex}", payload=data) from ex
                event_count += 1
                yield event

        logger.warning(f"Conversation stream ended without {STREAM_DONE} after {event_count} events")
        raise IncompleteStreamError(f"Conversation stream ended without {STREAM_DONE}")

    async def send_message(
        self,
        message: str,
        *,
        conversation_id: str | None = None,
        parent_message_id: str | None = None,
        on_progress: ProgressCallback | None = None,
        on_conversation_response: EventCallback | None = None,
    ) -> str:
        """Send a message and return the final reply text.

        ``on_progress`` receives the cumulative reply each time a non-empty chunk
        arrives; ``on_conversation_response`` receives every parsed event.
        Either callback may be a coroutine function.
        """
        response = ""
        events = self.stream_conversation(
            message,
            conversation_id=conversation_id,
            parent_message_id=parent_message_id,
        )
        try:
            async with aclosing(events):
                async for event in events:
                    await notify(on_conversation_response, event)

                    text = event.text
                    if not text:
                        continue
                    if not self._markdown:
                        text = markdown_to_text(text)
                    response = text
                    await notify(on_progress, text)
        except IncompleteStreamError as ex:
            ex.partial_response = response
            raise
        return response

    def get_conversation(
        self,
        *,
        conversation_id: str | None = None,
        parent_message_id: str | None = None,
    ) -> Conversation:
        return Conversation(self, conversation_id=conversation_id, parent_message_id=parent_message_id)
