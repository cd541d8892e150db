import unittest
import random
from datetime import datetime, timedelta, timezone

from core.row_key import device_prefix, reverse_millis, row_key, unix_millis

UINT64_MAX = 2**64 - 1
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestRowKey(unittest.TestCase):
    def setUp(self):
        self.ts = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_known_value(self):
        # 2024-01-01T00:00:00Z is 1704067200000 ms
        self.assertEqual(unix_millis(self.ts), 1704067200000)
        self.assertEqual(row_key("sensor-42", self.ts), "sensor-42#18446742369642351615")

    def test_epoch_is_all_ones(self):
        self.assertEqual(reverse_millis(EPOCH), UINT64_MAX)

    def test_pre_epoch_wraps_like_uint64(self):
        # -1 ms is 0xFFFFFFFFFFFFFFFF as uint64, complement 0
        self.assertEqual(reverse_millis(EPOCH - timedelta(milliseconds=1)), 0)
        self.assertEqual(reverse_millis(EPOCH - timedelta(milliseconds=5)), 4)

    def test_sub_millisecond_precision_is_floored(self):
        a = self.ts + timedelta(microseconds=1)
        b = self.ts + timedelta(microseconds=999)
        self.assertEqual(row_key("d", a), row_key("d", b))
        self.assertEqual(row_key("d", a), row_key("d", self.ts))

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 1, 1)
        self.assertEqual(row_key("d", naive), row_key("d", self.ts))

    def test_other_timezones_use_same_instant(self):
        plus_two = self.ts.astimezone(timezone(timedelta(hours=2)))
        self.assertEqual(row_key("d", plus_two), row_key("d", self.ts))

    def test_deterministic(self):
        self.assertEqual(row_key("sensor-42", self.ts), row_key("sensor-42", self.ts))

    def test_one_millisecond_apart(self):
        earlier = row_key("sensor-42", self.ts)
        later = row_key("sensor-42", self.ts + timedelta(milliseconds=1))
        self.assertNotEqual(earlier, later)
        self.assertLess(later, earlier)

    def test_newer_keys_sort_first(self):
        times = [self.ts + timedelta(milliseconds=random.randint(0, 10**12)) for _ in range(200)]
        keys = {t: row_key("sensor-42", t) for t in times}
        by_time_desc = [keys[t] for t in sorted(set(times), reverse=True)]
        self.assertListEqual(sorted(by_time_desc), by_time_desc)

    def test_fixed_width_for_modern_dates(self):
        for year in (1970, 2000, 2024, 2100, 9999):
            ts = datetime(year, 6, 1, tzinfo=timezone.utc)
            numeral = row_key("d", ts).split("#", 1)[1]
            self.assertEqual(len(numeral), 20)

    def test_prefix(self):
        self.assertEqual(device_prefix("sensor-42"), "sensor-42#")
        self.assertTrue(row_key("sensor-42", self.ts).startswith(device_prefix("sensor-42")))

    def test_rejects_separator_in_device_id(self):
        with self.assertRaises(ValueError):
            row_key("sensor#42", self.ts)

    def test_rejects_empty_device_id(self):
        with self.assertRaises(ValueError):
            device_prefix("")
