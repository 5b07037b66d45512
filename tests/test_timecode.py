"""Tests for timestamp parsing and formatting"""

import pytest

from subcue.errors import MalformedTimeCode, UnsupportedFormat
from subcue.timecode import format_time, parse_time


def test_parse_srt_time_basic():
    """Test basic SRT timestamp parsing"""
    assert parse_time("00:00:01,000", "srt") == 1
    assert parse_time("00:01:00,000", "srt") == 60
    assert parse_time("01:00:00,000", "srt") == 3600
    assert parse_time("00:00:00,500", "srt") == pytest.approx(0.5)


def test_parse_srt_time_complex():
    """Test a timestamp using every field"""
    assert parse_time("01:23:45,678", "srt") == pytest.approx(5025.678)


def test_parse_ass_time_centiseconds():
    """Test ASS timestamps use centiseconds and short hours"""
    assert parse_time("0:00:02.50", "ass") == pytest.approx(2.5)
    assert parse_time("10:00:00.01", "ass") == pytest.approx(36000.01)
    assert parse_time("1:02:03.04", "ssa") == pytest.approx(3723.04)


def test_parse_vtt_time():
    """Test WebVTT timestamps use a dot separator"""
    assert parse_time("00:00:00.500", "vtt") == pytest.approx(0.5)
    assert parse_time("00:02:03.250", "vtt") == pytest.approx(123.25)


def test_parse_time_strips_surrounding_whitespace():
    """Test padding around a timestamp is tolerated"""
    assert parse_time(" 0:00:01.00 ", "ass") == 1


def test_parse_time_invalid():
    """Test that invalid timestamps raise MalformedTimeCode"""
    with pytest.raises(MalformedTimeCode, match="Invalid srt timestamp"):
        parse_time("invalid", "srt")

    with pytest.raises(MalformedTimeCode):
        parse_time("1:2:3,4", "srt")

    # Separator belongs to the other format
    with pytest.raises(MalformedTimeCode):
        parse_time("00:00:01.000", "srt")
    with pytest.raises(MalformedTimeCode):
        parse_time("00:00:01,000", "vtt")

    # Wrong number of fraction digits
    with pytest.raises(MalformedTimeCode):
        parse_time("0:00:01.000", "ass")


def test_parse_time_out_of_range():
    """Test that out-of-range minutes and seconds are caught"""
    with pytest.raises(MalformedTimeCode, match="minutes"):
        parse_time("00:99:00,000", "srt")

    with pytest.raises(MalformedTimeCode, match="seconds"):
        parse_time("00:00:99,000", "srt")


def test_malformed_time_code_is_value_error():
    """Test MalformedTimeCode can be caught as a ValueError"""
    with pytest.raises(ValueError):
        parse_time("nope", "vtt")


def test_unknown_format():
    """Test that unknown formats are rejected"""
    with pytest.raises(UnsupportedFormat):
        parse_time("00:00:01,000", "sub")
    with pytest.raises(UnsupportedFormat):
        format_time(1.0, "txt")


def test_format_time():
    """Test formatting seconds per format"""
    assert format_time(83.456, "srt") == "00:01:23,456"
    assert format_time(83.456, "vtt") == "00:01:23.456"
    assert format_time(83.45, "ass") == "0:01:23.45"
    assert format_time(0, "srt") == "00:00:00,000"


def test_format_time_rounds_to_precision():
    """Test rounding does not produce an out-of-range fraction"""
    assert format_time(1.9996, "srt") == "00:00:02,000"
    assert format_time(59.999, "ass") == "0:01:00.00"


def test_format_time_negative():
    """Test that negative times cannot be formatted"""
    with pytest.raises(ValueError):
        format_time(-1, "srt")


@pytest.mark.parametrize(
    "text, fmt",
    [
        ("00:00:00,000", "srt"),
        ("01:59:59,999", "srt"),
        ("00:10:05,040", "srt"),
        ("0:00:00.00", "ass"),
        ("9:59:59.99", "ass"),
        ("12:34:56.78", "ssa"),
        ("00:00:00.001", "vtt"),
        ("23:00:01.500", "vtt"),
    ],
)
def test_format_inverts_parse(text, fmt):
    """Test formatting a parsed timestamp gives back the original text"""
    assert format_time(parse_time(text, fmt), fmt) == text


def test_format_inverts_parse_modulo_hour_padding():
    """Test ASS hours lose their zero padding"""
    assert format_time(parse_time("01:00:00.00", "ass"), "ass") == "1:00:00.00"
