"""Tests for activity extraction from daily logs."""

from datetime import date, datetime, time, timedelta, timezone

from models.activity import Category, RawDocument
from parsers.activity import (
    DEFAULT_ACTIVITY_TZ,
    date_from_filename,
    extract_activities,
    recognize_line,
    resolve_timestamp,
)

NOW = datetime(2025, 11, 21, 9, 0, tzinfo=timezone.utc)
UTC_MINUS_5 = timezone(timedelta(hours=-5))


def _doc(name: str, text: str, modified_at: datetime = NOW) -> RawDocument:
    return RawDocument(name=name, raw_text=text, modified_at=modified_at)


class TestRecognizeLine:
    def test_time_prefixed(self):
        parsed = recognize_line("14:30 Fixed auth bug")
        assert parsed.at == time(14, 30)
        assert parsed.text == "Fixed auth bug"

    def test_time_after_bullet(self):
        parsed = recognize_line("- 09:15 Sent email to Bob")
        assert parsed.at == time(9, 15)
        assert parsed.text == "Sent email to Bob"

    def test_bullet(self):
        parsed = recognize_line("* Published blog post")
        assert parsed.at is None
        assert parsed.text == "Published blog post"

    def test_heading(self):
        assert recognize_line("## Shipped v2").text == "Shipped v2"

    def test_invalid_time_falls_back_to_bullet(self):
        parsed = recognize_line("- 25:99 Fixed clock")
        assert parsed.at is None
        assert parsed.text == "25:99 Fixed clock"

    def test_plain_text_not_recognized(self):
        assert recognize_line("Fixed something in prose") is None


class TestDates:
    def test_date_from_filename(self):
        assert date_from_filename("2025-11-20.md") == date(2025, 11, 20)
        assert date_from_filename("notes-2025-11-20.md") == date(2025, 11, 20)

    def test_invalid_calendar_date(self):
        assert date_from_filename("2025-02-30.md") is None

    def test_missing_date(self):
        assert date_from_filename("notes.md") is None

    def test_noon_default(self):
        stamp = resolve_timestamp(None, date(2025, 11, 20), NOW)
        assert stamp == datetime(2025, 11, 20, 12, 0, tzinfo=UTC_MINUS_5)

    def test_no_file_date_uses_now(self):
        assert resolve_timestamp(time(8, 0), None, NOW) == NOW


class TestExtractActivities:
    def test_time_prefixed_line_in_dated_log(self):
        entries = extract_activities([_doc("2025-11-20.md", "14:30 Fixed auth bug")], now=NOW)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.category == Category.DEVELOPMENT
        assert entry.timestamp == datetime(2025, 11, 20, 14, 30, tzinfo=UTC_MINUS_5)
        assert entry.timestamp.utcoffset() == timedelta(hours=-5)
        assert entry.source == "2025-11-20.md"
        assert entry.action == "Fixed auth bug"

    def test_default_offset_is_fixed_minus_five(self):
        assert DEFAULT_ACTIVITY_TZ.utcoffset(None) == timedelta(hours=-5)

    def test_lines_without_action_words_are_dropped(self):
        text = "\n".join([
            "# Thursday",
            "- Lunch with the team",
            "- Thinking about the admin panel",
            "- Published blog post",
            "Wrote notes in prose",
        ])
        entries = extract_activities([_doc("2025-11-20.md", text)], now=NOW)

        assert [e.action for e in entries] == ["Published blog post"]
        assert entries[0].timestamp == datetime(2025, 11, 20, 12, 0, tzinfo=UTC_MINUS_5)

    def test_every_entry_passed_the_gate(self):
        from parsers.classifier import passes_gate

        text = "- Posted a tweet\n- Coffee\n## Merged PR\n10:00 Thought about stuff\n"
        entries = extract_activities([_doc("2025-11-20.md", text)], now=NOW)

        assert len(entries) == 2
        assert all(passes_gate(e.action) for e in entries)

    def test_sorted_newest_first_across_documents(self):
        docs = [
            _doc("2025-11-19.md", "08:00 Fixed older bug"),
            _doc("2025-11-20.md", "07:00 Deployed release\n16:45 Sent invoice email"),
        ]
        entries = extract_activities(docs, now=NOW)

        assert [e.action for e in entries] == [
            "Sent invoice email",
            "Deployed release",
            "Fixed older bug",
        ]

    def test_ties_keep_document_order(self):
        text = "- Fixed first\n- Fixed second\n- Fixed third"
        entries = extract_activities([_doc("2025-11-20.md", text)], now=NOW)
        assert [e.action for e in entries] == ["Fixed first", "Fixed second", "Fixed third"]

    def test_capped_at_limit(self):
        text = "\n".join(f"- Fixed bug {i}" for i in range(60))
        docs = [_doc("2025-11-20.md", text)]

        assert len(extract_activities(docs, now=NOW)) == 50
        assert len(extract_activities(docs, now=NOW, limit=5)) == 5

    def test_stale_documents_skipped(self):
        docs = [
            _doc("2025-11-01.md", "- Fixed ancient bug", modified_at=NOW - timedelta(days=10)),
            _doc("2025-11-20.md", "- Fixed fresh bug"),
        ]
        entries = extract_activities(docs, now=NOW)
        assert [e.action for e in entries] == ["Fixed fresh bug"]

    def test_undated_document_uses_processing_time(self):
        entries = extract_activities([_doc("notes.md", "- Shipped it")], now=NOW)
        assert entries[0].timestamp == NOW

    def test_custom_offset(self):
        tz = timezone(timedelta(hours=1))
        entries = extract_activities([_doc("2025-11-20.md", "14:30 Fixed auth bug")], now=NOW, tz=tz)
        assert entries[0].timestamp == datetime(2025, 11, 20, 13, 30, tzinfo=timezone.utc)

    def test_naive_now_treated_as_utc(self):
        entries = extract_activities(
            [_doc("2025-11-20.md", "- Fixed bug")],
            now=NOW.replace(tzinfo=None),
        )
        assert len(entries) == 1

    def test_empty_input(self):
        assert extract_activities([], now=NOW) == []
