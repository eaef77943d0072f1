"""Plain-text views of a finished structured summary."""

from .summary import StructuredSummary


def format_summary(summary: StructuredSummary) -> str:
    """Title, main summary, bulleted key points, then a metadata line."""
    parts = []
    if summary.title:
        parts.append(summary.title)
    if summary.main_summary:
        parts.append(summary.main_summary)
    if summary.key_points:
        bullets = "\n".join(f"• {point}" for point in summary.key_points)
        parts.append(f"Key Points:\n{bullets}")

    meta = []
    if summary.category:
        meta.append(f"Category: {summary.category}")
    if summary.sentiment:
        meta.append(f"Sentiment: {summary.sentiment.value}")
    if summary.read_time_minutes is not None:
        meta.append(f"Read Time: {summary.read_time_minutes} min")
    if meta:
        parts.append(" | ".join(meta))

    return "\n\n".join(parts)
