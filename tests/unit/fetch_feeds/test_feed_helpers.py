"""Tests for fetch_feeds.helpers module."""

from datetime import datetime, timezone

from fetch_feeds.helpers import (
    MAX_DESCRIPTION_LENGTH,
    clean_description,
    clean_text,
    parse_publication_date,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


class TestCleanText:
    def test_strips_cdata_and_tags(self) -> None:
        assert clean_text("<![CDATA[<p>Hello <i>there</i></p>]]>") == "Hello there"

    def test_decodes_entities(self) -> None:
        assert clean_text("a&nbsp;b &quot;c&quot; &#39;d&#39; &lt;tag&gt;") == "a b \"c\" 'd' <tag>"

    def test_amp_decoded_last(self) -> None:
        assert clean_text("&amp;lt;") == "&lt;"

    def test_collapses_whitespace(self) -> None:
        assert clean_text("  one\n\n two\t") == "one two"

    def test_none_is_empty(self) -> None:
        assert clean_text(None) == ""


class TestCleanDescription:
    def test_empty_becomes_none(self) -> None:
        assert clean_description("<p> </p>") is None

    def test_truncated(self) -> None:
        assert len(clean_description("x" * (MAX_DESCRIPTION_LENGTH + 10))) == MAX_DESCRIPTION_LENGTH


class TestParsePublicationDate:
    def test_rfc822(self) -> None:
        dt = parse_publication_date("Mon, 01 Jan 2024 12:00:00 GMT", NOW)
        assert dt == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_pdt_abbreviation(self) -> None:
        dt = parse_publication_date("Mon, 01 Jul 2024 05:00:00 PDT", NOW)
        assert dt == datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)

    def test_naive_treated_as_utc(self) -> None:
        dt = parse_publication_date("2024-01-01 08:00:00", NOW)
        assert dt.tzinfo == timezone.utc

    def test_missing_uses_now(self) -> None:
        assert parse_publication_date(None, NOW) == NOW
        assert parse_publication_date("   ", NOW) == NOW

    def test_invalid_uses_now(self) -> None:
        assert parse_publication_date("yesterday-ish", NOW) == NOW
