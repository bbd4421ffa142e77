import unittest

from loguru import logger

from chatgpt_session.logging_config import redact_secrets, setup_logging


class RedactSecretsTests(unittest.TestCase):
    def test_masks_bearer_token(self) -> None:
        self.assertEqual("Authorization: Bearer ***", redact_secrets("Authorization: Bearer eyJ.abc-def_1"))

    def test_masks_session_cookie(self) -> None:
        self.assertEqual(
            "cookie: __Secure-next-auth.session-token=***; other=1",
            redact_secrets("cookie: __Secure-next-auth.session-token=secret.value; other=1"),
        )

    def test_leaves_plain_messages(self) -> None:
        self.assertEqual("Refreshed access token", redact_secrets("Refreshed access token"))


class SetupLoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger.remove()

    def test_unknown_consumer_is_skipped(self) -> None:
        descriptions = setup_logging("DEBUG", consumers=[{"type": "nope"}, {"type": "console"}])

        self.assertEqual(["console (stderr, DEBUG)"], descriptions)

    def test_per_consumer_level_and_stream(self) -> None:
        descriptions = setup_logging("INFO", consumers=[{"type": "console", "stream": "stdout", "level": "ERROR"}])

        self.assertEqual(["console (stdout, ERROR)"], descriptions)

    def test_sinks_receive_redacted_messages(self) -> None:
        setup_logging("DEBUG", consumers=[])
        messages: list[str] = []
        logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")

        logger.debug("header Bearer secret-token")

        self.assertEqual(["header Bearer ***"], messages)


if __name__ == "__main__":
    unittest.main()
