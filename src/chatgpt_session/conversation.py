from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from loguru import logger

from chatgpt_session.callbacks import notify
from chatgpt_session.models import ConversationResponseEvent

if TYPE_CHECKING:
    from chatgpt_session.client import ChatGPTAPI


@dataclass(frozen=True)
class ConversationState:
    """Where the next message attaches in the remote conversation tree."""

    conversation_id: str | None = None
    parent_message_id: str | None = None

    @property
    def started(self) -> bool:
        return self.conversation_id is not None

    def advance(self, event: ConversationResponseEvent) -> ConversationState:
        if event.message is None or not event.message.id:
            return self
        conversation_id = self.conversation_id or event.conversation_id
        return replace(self, conversation_id=conversation_id, parent_message_id=event.message.id)


async def send_turn(
    api: ChatGPTAPI,
    state: ConversationState,
    message: str,
    *,
    on_progress: Callable[[str], Any] | None = None,
    on_conversation_response: Callable[[ConversationResponseEvent], Any] | None = None,
) -> tuple[ConversationState, str]:
    """Send ``message`` from ``state`` and return the advanced state and the reply text.

    A state without a conversation id starts a new conversation; its parent id is
    not sent. ``state`` itself is never modified.
    """
    new_state = state

    async def on_event(event: ConversationResponseEvent) -> None:
        nonlocal new_state
        new_state = new_state.advance(event)
        await notify(on_conversation_response, event)

    if state.started:
        text = await api.send_message(
            message,
            conversation_id=state.conversation_id,
            parent_message_id=state.parent_message_id,
            on_progress=on_progress,
            on_conversation_response=on_event,
        )
    else:
        text = await api.send_message(
            message,
            on_progress=on_progress,
            on_conversation_response=on_event,
        )
    return new_state, text


class Conversation:
    """Threads the conversation id and parent message id across successive messages.

    Sends on one instance run one at a time; use ``api.send_message`` directly to
    manage the ids yourself.
    """

    def __init__(
        self,
        api: ChatGPTAPI,
        *,
        conversation_id: str | None = None,
        parent_message_id: str | None = None,
    ):
        self._api = api
        self._state = ConversationState(conversation_id, parent_message_id)
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def conversation_id(self) -> str | None:
        return self._state.conversation_id

    @property
    def parent_message_id(self) -> str | None:
        return self._state.parent_message_id

    def reset(self) -> None:
        self._state = ConversationState()

    async def send_message(
        self,
        message: str,
        *,
        on_progress: Callable[[str], Any] | None = None,
        on_conversation_response: Callable[[ConversationResponseEvent], Any] | None = None,
    ) -> str:
        async with self._lock:
            async def observe(event: ConversationResponseEvent) -> None:
                # ids received so far survive a turn that fails later
                self._state = self._state.advance(event)
                await notify(on_conversation_response, event)

            new_state, text = await send_turn(
                self._api,
                self._state,
                message,
                on_progress=on_progress,
                on_conversation_response=observe,
            )
            self._state = new_state
            logger.debug(
                f"Conversation advanced: conversation_id={new_state.conversation_id}, "
                f"parent_message_id={new_state.parent_message_id}"
            )
            return text
