import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from chatgpt_session.app_config import (
    build_client,
    load_json_config,
    parse_app_config,
    resolve_runtime_env,
)
from chatgpt_session.chat_session import ChatSession, ensure_auth_with_retry
from chatgpt_session.errors import AuthenticationError
from chatgpt_session.logging_config import setup_logging


async def main() -> None:
    load_dotenv()

    app_config = parse_app_config(load_json_config())

    log_descriptions = setup_logging(
        level=app_config.log_level,
        consumers=app_config.log_consumers,
    )

    runtime_env = resolve_runtime_env()
    if not runtime_env.session_token:
        logger.error(f"{runtime_env.session_token_env_var} environment variable is required.")
        sys.exit(1)

    api = build_client(app_config, runtime_env)
    try:
        try:
            await ensure_auth_with_retry(api, app_config.startup_auth_retries)
        except AuthenticationError as ex:
            logger.error(f"{ex}")
            sys.exit(1)

        conversation = api.get_conversation(
            conversation_id=app_config.conversation_id,
            parent_message_id=app_config.parent_message_id,
        )
        session = ChatSession(api, conversation)

        print("chatgpt-session (type 'exit' to quit, '/help' for commands)")
        print(f"Rendering: {'markdown' if app_config.markdown else 'plain text'}")
        if conversation.conversation_id:
            print(f"Resuming conversation: {conversation.conversation_id}")
        if log_descriptions:
            print(f"Logging: {', '.join(log_descriptions)}")
        print()

        while True:
            try:
                user_input = input("you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                print()
                await session.run(trimmed)
                print("\n")
            except Exception as ex:
                print()
                logger.error(f"Unhandled error: {ex}")
    finally:
        await api.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
