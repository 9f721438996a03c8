"""Tests for MoodHistory and summarize."""

from __future__ import annotations

from datetime import datetime, timezone

from carewatch.domains.mood.domain_logic.history import MoodHistory, summarize
from carewatch.domains.mood.domain_logic.mood_models import ClassificationResult, QuestionAnswer

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _store(repo, user_id, day, mood):
    repo.upsert_entry(
        user_id,
        datetime(2024, 5, day, 9, 0, tzinfo=timezone.utc),
        ClassificationResult(mood=mood, analysis_source="ai"),
        [QuestionAnswer("How are you?", "Answer for %s" % mood)],
    )


class TestBuild:
    def test_weekly_window(self, mood_repository):
        report = MoodHistory(mood_repository).build("u1", "weekly", now=NOW)
        assert report["period"] == "weekly"
        assert report["startDate"] == "2024-05-03"
        assert report["endDate"] == "2024-05-10"
        assert len(report["entries"]) == 8
        assert report["summary"]["predominantMood"] == "none"

    def test_monthly_window(self, mood_repository):
        report = MoodHistory(mood_repository).build("u1", "monthly", now=NOW)
        assert report["startDate"] == "2024-04-10"
        assert len(report["entries"]) == 31

    def test_unknown_period_is_weekly(self, mood_repository):
        assert MoodHistory(mood_repository).build("u1", "yearly", now=NOW)["period"] == "weekly"

    def test_days_filled_from_entries(self, mood_repository):
        _store(mood_repository, "u1", 9, "Depressed")
        _store(mood_repository, "u1", 1, "Normal")  # outside the weekly window

        report = MoodHistory(mood_repository).build("u1", now=NOW)
        by_date = {row["date"]: row for row in report["entries"]}

        assert by_date["2024-05-09"]["mood"] == "sad"
        assert by_date["2024-05-09"]["moodScore"] == 2
        assert by_date["2024-05-09"]["detectedMood"] == "Depressed"
        assert by_date["2024-05-09"]["responses"][0]["answer"] == "Answer for Depressed"
        assert by_date["2024-05-08"]["mood"] is None
        assert by_date["2024-05-08"]["emotions"] == []
        assert report["summary"]["totalEntries"] == 1

    def test_other_users_excluded(self, mood_repository):
        _store(mood_repository, "u2", 9, "Normal")
        report = MoodHistory(mood_repository).build("u1", now=NOW)
        assert report["summary"]["totalEntries"] == 0


class TestSummarize:
    def test_counts_and_average(self, mood_repository):
        _store(mood_repository, "u1", 7, "Normal")
        _store(mood_repository, "u1", 8, "Stressed")
        _store(mood_repository, "u1", 9, "Depressed")

        summary = summarize(mood_repository.get_entries("u1"))
        assert summary["totalEntries"] == 3
        assert summary["averageScore"] == 4.7  # (8 + 4 + 2) / 3
        assert summary["moodCounts"] == {"happy": 1, "sad": 1, "neutral": 1}

    def test_ties_go_to_later_mood(self, mood_repository):
        _store(mood_repository, "u1", 7, "Normal")
        _store(mood_repository, "u1", 8, "Depressed")
        summary = summarize(mood_repository.get_entries("u1"))
        assert summary["predominantMood"] == "sad"

    def test_majority(self, mood_repository):
        for day in (6, 7, 8):
            _store(mood_repository, "u1", day, "Normal")
        _store(mood_repository, "u1", 9, "Highly Depressed")
        summary = summarize(mood_repository.get_entries("u1"))
        assert summary["predominantMood"] == "happy"
        assert summary["averageScore"] == 6.3  # (8 * 3 + 1) / 4 = 6.25

    def test_empty(self):
        summary = summarize([])
        assert summary["averageScore"] == 0.0
        assert summary["predominantMood"] == "none"
