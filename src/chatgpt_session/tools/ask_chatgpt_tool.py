from typing import Any

import httpx
from loguru import logger

from chatgpt_session.client import ChatGPTAPI
from chatgpt_session.errors import ChatGPTError

_MAX_REPLY_CHARS = 40_000


class AskChatGPTTool:
    """Lets an agent framework forward a prompt to ChatGPT, keeping one running conversation."""

    def __init__(self, api: ChatGPTAPI):
        self._api = api
        self._conversation = api.get_conversation()

    @property
    def name(self) -> str:
        return "ask_chatgpt"

    @property
    def description(self) -> str:
        return (
            "Send a prompt to ChatGPT and return its reply. "
            "Follow-up prompts continue the same conversation unless newConversation is true."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "The message to send to ChatGPT",
                },
                "newConversation": {
                    "type": "boolean",
                    "description": "Start a fresh conversation before sending (default false)",
                },
            },
            "required": ["prompt"],
        }

    async def execute(self, tool_input: dict[str, Any]) -> str:
        prompt = str(tool_input.get("prompt", "")).strip()
        if not prompt:
            return "Error: prompt must not be empty"

        if tool_input.get("newConversation"):
            self._conversation.reset()

        try:
            reply = await self._conversation.send_message(prompt)
        except (ChatGPTError, httpx.HTTPError) as ex:
            logger.error(f"ask_chatgpt failed: {ex}")
            return f"Error: {ex}"

        if len(reply) > _MAX_REPLY_CHARS:
            reply = reply[:_MAX_REPLY_CHARS] + f"\n\n... truncated ({len(reply):,} chars total)"
        return reply
