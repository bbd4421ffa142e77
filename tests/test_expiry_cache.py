import unittest

from chatgpt_session.expiry_cache import ExpiryCache

from fake_transport import FakeClock


class ExpiryCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = ExpiryCache(10, clock=self.clock)

    def test_get_returns_value_before_expiry(self) -> None:
        self.cache.set("k", "v")
        self.clock.advance(9.9)
        self.assertEqual("v", self.cache.get("k"))
        self.assertIn("k", self.cache)

    def test_entry_expires_at_max_age(self) -> None:
        self.cache.set("k", "v")
        self.clock.advance(10)
        self.assertIsNone(self.cache.get("k"))
        self.assertNotIn("k", self.cache)
        self.assertEqual(0, len(self.cache))

    def test_set_overwrites_and_restarts_timer(self) -> None:
        self.cache.set("k", "old")
        self.clock.advance(8)
        self.cache.set("k", "new")
        self.clock.advance(8)
        self.assertEqual("new", self.cache.get("k"))

    def test_default_for_missing_key(self) -> None:
        self.assertEqual("fallback", self.cache.get("missing", "fallback"))

    def test_delete_and_clear(self) -> None:
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.delete("a")
        self.assertEqual(1, len(self.cache))
        self.cache.clear()
        self.assertEqual(0, len(self.cache))

    def test_rejects_non_positive_max_age(self) -> None:
        with self.assertRaises(ValueError):
            ExpiryCache(0)


if __name__ == "__main__":
    unittest.main()
