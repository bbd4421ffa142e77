from __future__ import annotations

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from chatgpt_session.client import ChatGPTAPI
from chatgpt_session.commands.router import CommandRouter
from chatgpt_session.conversation import Conversation
from chatgpt_session.errors import AuthenticationError


def _is_transient_auth_failure(ex: BaseException) -> bool:
    return isinstance(ex, AuthenticationError) and isinstance(ex.__cause__, httpx.TransportError)


def _on_retry(retry_state):
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    reason = type(exc.__cause__ or exc).__name__ if exc else "Unknown"
    logger.warning(f"{reason} during login. Retrying in {wait:.0f}s (attempt {attempt})...")


async def ensure_auth_with_retry(
    api: ChatGPTAPI,
    attempts: int = 3,
    *,
    wait: wait_base | None = None,
) -> str:
    """Probe the login once at startup, retrying only when the network failed.

    The auth exchange is idempotent; conversation turns are never retried.
    """
    retrying = retry(
        retry=retry_if_exception(_is_transient_auth_failure),
        wait=wait or wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(attempts),
        before_sleep=_on_retry,
        reraise=True,
    )
    return await retrying(api.ensure_auth)()


class ChatSession:
    _LINE_PREFIX = "assistant> "

    def __init__(self, api: ChatGPTAPI, conversation: Conversation | None = None):
        self._api = api
        self._conversation = conversation or api.get_conversation()
        self._printed = ""

        self._command_router = CommandRouter(
            on_help=self._on_help,
            on_new=self._on_new,
            on_state=self._on_state,
            on_auth=self._on_auth,
            on_unknown=self._on_unknown_command,
        )

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    async def run(self, user_message: str) -> str | None:
        """Handle one line of input: a local command, or a message sent to ChatGPT."""
        if await self._command_router.try_handle(user_message):
            return None

        self._printed = ""
        print(self._LINE_PREFIX, end="", flush=True)
        reply = await self._conversation.send_message(user_message, on_progress=self._print_progress)

        if reply != self._printed:
            if reply.startswith(self._printed):
                print(reply[len(self._printed):], end="", flush=True)
            else:
                # plain-text rendering can rewrite earlier text; show the final reply whole
                print(f"\n{self._LINE_PREFIX}{reply}", end="", flush=True)
        return reply

    def _print_progress(self, text: str) -> None:
        if not text.startswith(self._printed):
            return
        print(text[len(self._printed):], end="", flush=True)
        self._printed = text

    async def _on_help(self) -> None:
        print(f"{self._LINE_PREFIX}Commands:")
        print(f"{self._LINE_PREFIX}- /new    start a new conversation")
        print(f"{self._LINE_PREFIX}- /state  show the conversation id and parent message id")
        print(f"{self._LINE_PREFIX}- /auth   check that the session token is still valid")
        print(f"{self._LINE_PREFIX}- exit    quit")

    async def _on_new(self) -> None:
        self._conversation.reset()
        print(f"{self._LINE_PREFIX}Started a new conversation.")

    async def _on_state(self) -> None:
        state = self._conversation.state
        print(f"{self._LINE_PREFIX}Conversation: {state.conversation_id or '(new)'}")
        print(f"{self._LINE_PREFIX}Parent message: {state.parent_message_id or '-'}")

    async def _on_auth(self) -> None:
        if await self._api.get_is_authenticated():
            print(f"{self._LINE_PREFIX}Authenticated.")
        else:
            print(f"{self._LINE_PREFIX}Not authenticated. Refresh CHATGPT_SESSION_TOKEN.")

    def _on_unknown_command(self, command: str) -> None:
        print(f"{self._LINE_PREFIX}Unknown command: {command}. Type /help for commands.")
