import logging

import pytest

from bibliography.catalog.parser import UNKNOWN_AUTHOR, UNTITLED, ParsedName, parse_filename


def test_parse_conventional_name() -> None:
    parsed = parse_filename("1987 - Hans Joosten - Peatlands of Europe")
    assert parsed == ParsedName(title="Peatlands of Europe", author="Hans Joosten", year=1987)


def test_title_keeps_internal_delimiter() -> None:
    parsed = parse_filename("2001 - Jane Doe - Part One - Part Two")
    assert parsed.author == "Jane Doe"
    assert parsed.title == "Part One - Part Two"
    assert parsed.year == 2001


def test_segments_are_stripped_and_defaults_applied() -> None:
    parsed = parse_filename("2010 -   -  ")
    assert parsed == ParsedName(title=UNTITLED, author=UNKNOWN_AUTHOR, year=2010)


@pytest.mark.parametrize(
    "name, expected_title",
    [
        ("Just a title", "Just a title"),
        ("two_part-name", "two part name"),
        ("Author - Title", "Author   Title"),
        ("98 - Short Year - Title", "98   Short Year   Title"),
        ("19a7 - Bad Year - Title", "19a7   Bad Year   Title"),
        ("12345 - Long Year - Title", "12345   Long Year   Title"),
        ("199² - Odd - Title", "199²   Odd   Title"),
    ],
)
def test_fallback_for_unconventional_names(name: str, expected_title: str) -> None:
    parsed = parse_filename(name)
    assert parsed.title == expected_title
    assert parsed.author == UNKNOWN_AUTHOR
    assert parsed.year is None


def test_fallback_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="bibliography.catalog.parser"):
        parse_filename("no convention here")
    assert "Could not parse filename format" in caplog.text


def test_empty_name_falls_back_to_untitled() -> None:
    assert parse_filename("") == ParsedName(title=UNTITLED, author=UNKNOWN_AUTHOR, year=None)
