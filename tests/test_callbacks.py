import asyncio
import unittest

from chatgpt_session.callbacks import notify


class NotifyTests(unittest.TestCase):
    def test_none_callback_is_skipped(self) -> None:
        asyncio.run(notify(None, "x"))

    def test_sync_callback_receives_value(self) -> None:
        seen: list[str] = []
        asyncio.run(notify(seen.append, "x"))
        self.assertEqual(["x"], seen)

    def test_async_callback_is_awaited(self) -> None:
        seen: list[str] = []

        async def record(value: str) -> None:
            await asyncio.sleep(0)
            seen.append(value)

        asyncio.run(notify(record, "x"))
        self.assertEqual(["x"], seen)


if __name__ == "__main__":
    unittest.main()
