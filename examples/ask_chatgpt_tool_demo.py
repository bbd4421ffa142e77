"""Hand the ask_chatgpt tool to a function-calling agent framework.

Prints the function spec a framework would register, then invokes the tool
the way a framework would when the model calls it.
"""

import asyncio
import json
import os
import sys

from dotenv import load_dotenv
from loguru import logger

from chatgpt_session.client import ChatGPTAPI
from chatgpt_session.logging_config import setup_logging
from chatgpt_session.tool import to_function_specs
from chatgpt_session.tools.ask_chatgpt_tool import AskChatGPTTool


async def main() -> None:
    load_dotenv()
    setup_logging(level="INFO", consumers=[{"type": "console"}])

    session_token = os.environ.get("CHATGPT_SESSION_TOKEN", "")
    if not session_token:
        logger.error("CHATGPT_SESSION_TOKEN environment variable is required.")
        sys.exit(1)

    async with ChatGPTAPI(session_token, markdown=False) as api:
        tools = [AskChatGPTTool(api)]
        print(json.dumps(to_function_specs(tools), indent=2))

        tool_map = {t.name: t for t in tools}
        for prompt in ("What is the capital of California?", "And of New York?"):
            result = await tool_map["ask_chatgpt"].execute({"prompt": prompt})
            print(f"ask_chatgpt> {result}\n")


if __name__ == "__main__":
    asyncio.run(main())
