import pytest
from livewatch.utils import extract_video_id, build_watch_url


@pytest.mark.parametrize("url_input, expected_id", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s", "dQw4w9WgXcQ"),
    ("https://m.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("https://www.youtube.com/live/jfKfPfyJRdk", "jfKfPfyJRdk"),
    ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
    ("guarda qui https://youtu.be/abc123 grazie", "abc123"),
])
def test_extract_video_id_supported_shapes(url_input, expected_id):
    assert extract_video_id(url_input) == expected_id


@pytest.mark.parametrize("url_input", [
    "",
    "   ",
    None,
    "https://vimeo.com/123456",
    "https://www.youtube.com/@STATiCalmo",
    "non è un url",
])
def test_extract_video_id_unparseable_input(url_input):
    assert extract_video_id(url_input) is None


def test_extract_video_id_keeps_query_beyond_regex_boundary():
    """Nessuna normalizzazione: solo '&' e spazi chiudono l'ID catturato."""
    assert extract_video_id("https://youtu.be/abc123?si=xyz") == "abc123?si=xyz"


def test_build_watch_url():
    assert build_watch_url("abc123") == "https://www.youtube.com/watch?v=abc123"
