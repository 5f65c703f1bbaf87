"""Tests for incremental kernel log extraction."""

import random

import pytest
from continuous_monitor.logs import LogEntry, extract, extract_text, parse_batch


def ts_entry(ts: float, message: str = "msg") -> LogEntry:
    return LogEntry(raw_text=f"[{ts:12.6f}] {message}", timestamp=ts)


def plain_entry(text: str = "    continuation") -> LogEntry:
    return LogEntry(raw_text=text, timestamp=None)


def random_batch(rng: random.Random, size: int):
    batch = []
    for _ in range(size):
        if rng.random() < 0.2:
            batch.append(plain_entry())
        else:
            batch.append(ts_entry(round(rng.uniform(0, 100), 6)))
    return batch


class TestScenarios:
    """Fixed scenarios for the extractor."""

    def test_only_entries_after_watermark(self):
        """Entries at or below the watermark are skipped."""
        batch = [
            ts_entry(5.0, "a"),
            ts_entry(10.0, "b"),
            ts_entry(10.5, "c"),
            ts_entry(11.2, "d"),
            plain_entry("    trailing continuation"),
        ]
        result = extract(batch, 10.0)

        assert [e.timestamp for e in result.new_entries] == [10.5, 11.2]
        assert result.new_offset == 11.2
        assert "continuation" not in result.text

    def test_empty_buffer_keeps_watermark(self):
        """An empty buffer yields nothing and an unchanged watermark."""
        result = extract([], 42.5)
        assert result.new_entries == []
        assert result.new_offset == 42.5
        assert result.text == ""

    def test_tie_is_excluded(self):
        """An entry equal to the watermark is not emitted again."""
        result = extract([ts_entry(7.25)], 7.25)
        assert result.new_entries == []
        assert result.new_offset == 7.25

    def test_zero_watermark_emits_all_timestamped(self):
        """After a reset every timestamped entry is new."""
        batch = [ts_entry(0.5), plain_entry(), ts_entry(1.0), ts_entry(3.0)]
        result = extract(batch, 0.0)
        assert len(result.new_entries) == 3
        assert result.new_offset == 3.0

    def test_out_of_order_entries(self):
        """Entries are judged against the pre-cycle watermark, not each other."""
        batch = [ts_entry(20.0, "late"), ts_entry(15.0, "early"), ts_entry(8.0, "old")]
        result = extract(batch, 10.0)

        assert [e.timestamp for e in result.new_entries] == [20.0, 15.0]
        assert result.new_offset == 20.0

    def test_truncated_buffer_below_watermark(self):
        """A buffer entirely below the watermark yields nothing."""
        batch = [ts_entry(1.0), ts_entry(2.0)]
        result = extract(batch, 500.0)
        assert result.new_entries == []
        assert result.new_offset == 500.0

    def test_none_watermark_returns_everything(self):
        """No watermark reports all timestamped entries and their maximum."""
        batch = [ts_entry(1.5), plain_entry(), ts_entry(4.25)]
        result = extract(batch, None)
        assert len(result.new_entries) == 2
        assert result.new_offset == 4.25

    def test_preserves_original_text(self):
        """Emitted entries carry their original line text."""
        line = "[   12.345678] usb 1-1: \"quoted\" \\ backslash"
        result = extract_text(line + "\n", 0.0)
        assert result.text == line

    def test_microsecond_precision(self):
        """Timestamps one microsecond apart are distinguished."""
        text = "[ 86399.999999] a\n[ 86400.000000] b\n[ 86400.000001] c\n"
        result = extract_text(text, 86400.0)
        assert [e.raw_text for e in result.new_entries] == ["[ 86400.000001] c"]
        assert result.new_offset == 86400.000001

    def test_advanced_from(self):
        """advanced_from reports whether the watermark moved."""
        assert extract([ts_entry(2.0)], 1.0).advanced_from(1.0)
        assert not extract([ts_entry(1.0)], 1.0).advanced_from(1.0)


class TestProperties:
    """Properties that hold for any buffer and watermark."""

    @pytest.mark.parametrize("seed", range(25))
    def test_watermark_never_decreases(self, seed):
        """The new offset is at least the old one."""
        rng = random.Random(seed)
        batch = random_batch(rng, rng.randint(0, 40))
        watermark = rng.uniform(0, 100)
        assert extract(batch, watermark).new_offset >= watermark

    @pytest.mark.parametrize("seed", range(25))
    def test_filter_is_exact_and_complete(self, seed):
        """Exactly the timestamped entries above the watermark are emitted."""
        rng = random.Random(seed)
        batch = random_batch(rng, rng.randint(0, 40))
        watermark = rng.uniform(0, 100)

        result = extract(batch, watermark)
        expected = [e for e in batch if e.timestamp is not None and e.timestamp > watermark]

        assert result.new_entries == expected
        assert all(e.timestamp > watermark for e in result.new_entries)

    @pytest.mark.parametrize("seed", range(25))
    def test_rerun_on_same_buffer_is_empty(self, seed):
        """Extracting again from the new offset finds nothing."""
        rng = random.Random(seed)
        batch = random_batch(rng, rng.randint(0, 40))
        watermark = rng.uniform(0, 100)

        first = extract(batch, watermark)
        second = extract(batch, first.new_offset)

        assert second.new_entries == []
        assert second.new_offset == first.new_offset

    def test_untimestamped_lines_are_inert(self):
        """Untimestamped lines never appear and never move the watermark."""
        batch = [plain_entry("[not a timestamp] x"), plain_entry("plain"), plain_entry("")]
        result = extract(batch, 3.0)
        assert result.new_entries == []
        assert result.new_offset == 3.0

    def test_appended_entries_only(self):
        """Growing the buffer yields exactly the appended entries."""
        text = "[    1.000000] boot\n[    2.000000] driver\n"
        first = extract_text(text, 0.0)

        text += "[    3.500000] eth0: link up\n    detail line\n[    4.000000] done\n"
        second = extract_text(text, first.new_offset)

        assert [e.raw_text for e in second.new_entries] == [
            "[    3.500000] eth0: link up",
            "[    4.000000] done",
        ]
        assert second.new_offset == 4.0
        assert len(parse_batch(text)) == 5
