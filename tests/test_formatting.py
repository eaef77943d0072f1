"""Tests for nutshell_client.formatting."""

from nutshell_client.formatting import format_summary
from nutshell_client.summary import Sentiment, StructuredSummary


class TestFormatSummary:
    def test_full_summary(self):
        summary = StructuredSummary(
            title="Marsh Carbon",
            main_summary="Wetlands store more carbon than thought.",
            key_points=("Three-year study", "Higher estimates"),
            category="Science",
            sentiment=Sentiment.POSITIVE,
            read_time_minutes=4,
        )
        assert format_summary(summary) == (
            "Marsh Carbon\n\n"
            "Wetlands store more carbon than thought.\n\n"
            "Key Points:\n• Three-year study\n• Higher estimates\n\n"
            "Category: Science | Sentiment: positive | Read Time: 4 min"
        )

    def test_missing_sections_are_skipped(self):
        summary = StructuredSummary(title="Only a title", read_time_minutes=0)
        assert format_summary(summary) == "Only a title\n\nRead Time: 0 min"

    def test_empty(self):
        assert format_summary(StructuredSummary()) == ""
