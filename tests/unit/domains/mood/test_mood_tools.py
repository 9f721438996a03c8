"""Tests for date handling in the mood tools."""

from __future__ import annotations

import pytest

from carewatch.core.storage.repository import MoodRepository
from carewatch.domains.mood.tools.mood_tools import _parse_day


class TestParseDay:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-05-01", "2024-05-01"),
            ("2024-5-1", "2024-05-01"),
            (" 2024-05-01 ", "2024-05-01"),
            ("2024-05-01T08:30:00", "2024-05-01"),
            ("2024-05-01T21:15:00Z", "2024-05-01"),
            ("2024-05-01T21:15:00+00:00", "2024-05-01"),
        ],
    )
    def test_accepted_forms(self, mood_repository, value, expected):
        assert _parse_day(value, mood_repository) == expected

    def test_timestamp_lands_on_reference_day(self, care_db, field_encryptor):
        repo = MoodRepository(care_db, field_encryptor, day_boundary_tz="Asia/Tokyo")
        assert _parse_day("2024-05-01T21:15:00Z", repo) == "2024-05-02"

    @pytest.mark.parametrize("value", ["not-a-date", "2024-13-01", "2024-02-30", "yesterday", ""])
    def test_rejected(self, mood_repository, value):
        with pytest.raises(ValueError):
            _parse_day(value, mood_repository)
