import threading
import unittest

from yahoo_quotes.services.ttl_cache import TtlCache


class TtlCacheTest(unittest.TestCase):
    def test_missing_key_returns_none(self):
        cache = TtlCache()

        self.assertIsNone(cache.get("quote_AAPL"))

    def test_entry_visible_until_ttl_elapses(self):
        cache = TtlCache(ttl_sec=300)
        cache.put("quote_AAPL", {"price": 150.0}, now=1000.0)

        self.assertEqual(cache.get("quote_AAPL", now=1299.0), {"price": 150.0})
        self.assertIsNone(cache.get("quote_AAPL", now=1300.0))

    def test_expired_entry_is_removed_on_read(self):
        cache = TtlCache(ttl_sec=300)
        cache.put("quote_AAPL", {"price": 150.0}, now=1000.0)
        cache.put("quote_MSFT", {"price": 400.0}, now=1250.0)

        cache.get("quote_AAPL", now=1400.0)

        self.assertEqual(len(cache), 1)

    def test_put_sweeps_expired_entries_once_over_capacity(self):
        cache = TtlCache(ttl_sec=300, max_entries=3)
        for i in range(4):
            cache.put(f"quote_{i}", i, now=0.0)
        self.assertEqual(len(cache), 4)

        cache.put("quote_fresh", "x", now=400.0)

        self.assertEqual(len(cache), 1)
        self.assertEqual(cache.get("quote_fresh", now=400.0), "x")

    def test_put_under_capacity_keeps_expired_entries_until_read(self):
        cache = TtlCache(ttl_sec=300, max_entries=100)
        cache.put("quote_old", 1, now=0.0)

        cache.put("quote_new", 2, now=400.0)

        self.assertEqual(len(cache), 2)

    def test_values_are_copied_in_and_out(self):
        cache = TtlCache()
        events = [{"amount": 0.24}]
        cache.put("div_history_AAPL_2y", events)
        events.append({"amount": 0.25})

        first = cache.get("div_history_AAPL_2y")
        first.append({"amount": 9.99})
        second = cache.get("div_history_AAPL_2y")

        self.assertEqual(second, [{"amount": 0.24}])

    def test_concurrent_puts_keep_every_entry(self):
        cache = TtlCache(max_entries=10_000)

        def writer(offset: int) -> None:
            for i in range(200):
                cache.put(f"quote_{offset}_{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(cache), 1600)
        self.assertEqual(cache.get("quote_7_199"), 199)

    def test_clear_drops_everything(self):
        cache = TtlCache()
        cache.put("quote_AAPL", 1)

        cache.clear()

        self.assertEqual(len(cache), 0)


if __name__ == "__main__":
    unittest.main()
