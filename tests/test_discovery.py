"""Tests for finding and reading subtitle files next to a video"""

from pathlib import Path

from subcue.discovery import find_subtitle_file, format_hint_for, is_video_file, read_subtitle_file


def test_is_video_file():
    """Test video extensions are matched case-insensitively"""
    assert is_video_file("movie.mp4")
    assert is_video_file("/videos/Movie.MKV")
    assert not is_video_file("movie.srt")
    assert not is_video_file("movie")


def test_format_hint_for():
    """Test the hint is the lowercased extension without a dot"""
    assert format_hint_for("movie.SRT") == "srt"
    assert format_hint_for(Path("/a/b/movie.en.vtt")) == "vtt"


def test_find_subtitle_file_order(tmp_path: Path):
    """Test srt wins over ass, ssa and vtt"""
    video = tmp_path / "movie.mp4"
    video.write_bytes(b"")
    for ext in ("vtt", "ass", "srt"):
        (tmp_path / f"movie.{ext}").write_text("x", encoding="utf-8")

    assert find_subtitle_file(video) == tmp_path / "movie.srt"

    (tmp_path / "movie.srt").unlink()
    assert find_subtitle_file(video) == tmp_path / "movie.ass"


def test_find_subtitle_file_uses_full_base_name(tmp_path: Path):
    """Test only the last extension of the video is replaced"""
    (tmp_path / "show.s01e01.vtt").write_text("x", encoding="utf-8")
    (tmp_path / "show.srt").write_text("x", encoding="utf-8")

    assert find_subtitle_file(tmp_path / "show.s01e01.mkv") == tmp_path / "show.s01e01.vtt"


def test_find_subtitle_file_missing(tmp_path: Path):
    """Test None when no subtitle file exists"""
    assert find_subtitle_file(tmp_path / "movie.mp4") is None


def test_read_subtitle_file_utf8_bom(tmp_path: Path):
    """Test a UTF-8 byte order mark is removed"""
    path = tmp_path / "movie.srt"
    path.write_bytes("\ufeff1\n00:00:01,000 --> 00:00:02,000\n你好\n".encode("utf-8"))

    assert read_subtitle_file(path).startswith("1\n")


def test_read_subtitle_file_utf16(tmp_path: Path):
    """Test UTF-16 files with a BOM are decoded"""
    path = tmp_path / "movie.vtt"
    path.write_bytes("WEBVTT\n".encode("utf-16"))

    assert read_subtitle_file(path) == "WEBVTT\n"


def test_read_subtitle_file_detects_gbk(tmp_path: Path):
    """Test GBK-encoded Chinese subtitles are detected"""
    text = (
        "1\n00:00:01,000 --> 00:00:03,000\n我们明天早上在火车站见面吧。\n\n"
        "2\n00:00:04,000 --> 00:00:06,000\n好的，我会准时到达，不要担心。\n\n"
        "3\n00:00:07,000 --> 00:00:09,000\n记得带上你的护照和车票。\n"
    )
    path = tmp_path / "movie.srt"
    path.write_bytes(text.encode("gbk"))

    assert read_subtitle_file(path) == text


def test_read_subtitle_file_detects_cp1252(tmp_path: Path):
    """Test Western European cp1252 text is not decoded as a CJK codepage"""
    text = (
        "1\n00:00:01,000 --> 00:00:03,000\nLe chef a préparé une crème brûlée.\n\n"
        "2\n00:00:04,000 --> 00:00:06,000\nC'était délicieux, très élégant à côté du café.\n\n"
        "3\n00:00:07,000 --> 00:00:09,000\nCrème brûlée pour la fenêtre, s'il vous plaît.\n"
    )
    path = tmp_path / "movie.srt"
    path.write_bytes(text.encode("cp1252"))

    decoded = read_subtitle_file(path)
    assert "Crème brûlée" in decoded
    assert "préparé une crème brûlée" in decoded


def test_read_subtitle_file_undecodable_bytes_are_replaced(tmp_path: Path):
    """Test bytes no detected encoding accepts still produce text"""
    path = tmp_path / "movie.srt"
    path.write_bytes(b"1\n00:00:01,000 --> 00:00:02,000\nHi \x81\x8d\x8f\x90\x9d\n")

    assert read_subtitle_file(path).startswith("1\n00:00:01,000 --> 00:00:02,000\nHi ")
