"""Unique current-timestamp generation."""

from datetime import datetime

from cdc_formatter.timestamps import UniqueTimestamp


def test_frozen_clock_still_strictly_increases(fixed_timestamps):
    stamps = [fixed_timestamps.generate() for _ in range(3)]
    assert stamps == [
        "2026-10-17T09:15:02.000000",
        "2026-10-17T09:15:02.000001",
        "2026-10-17T09:15:02.000002",
    ]


def test_clock_going_backwards_is_ignored():
    times = iter([datetime(2026, 1, 1, 12), datetime(2026, 1, 1, 11)])
    generator = UniqueTimestamp(clock=lambda: next(times))
    first = generator.next()
    second = generator.next()
    assert second > first


def test_plain_format(fixed_timestamps):
    assert fixed_timestamps.generate(iso8601=False) == "2026-10-17 09:15:02.000000"
