import pytest
from livewatch.services.youtube.page_signals import (
    extract_page_signals, LIVE_MARKERS, UNAVAILABLE_MARKERS, PAGE_MARKERS_VERSION
)

LIVE_PAGE = """
<html><head><title>Concerto in diretta - YouTube</title></head>
<body><script>var ytInitialPlayerResponse = {"videoDetails":{"author":"Canale Musica","isLiveContent":true}};</script></body></html>
"""

VOD_PAGE = """
<html><head><title>Tutorial Python &amp; Flask - YouTube</title></head>
<body><script>{"videoDetails":{"author":"Dev Italia","isLiveContent":false}}</script></body></html>
"""


@pytest.mark.parametrize("marker", LIVE_MARKERS)
def test_each_live_marker_is_detected(marker):
    signals = extract_page_signals(f"<html><title>x</title>{marker}</html>")
    assert signals.unavailable is False
    assert signals.is_live is True


@pytest.mark.parametrize("marker", UNAVAILABLE_MARKERS)
def test_unavailable_marker_wins_over_live(marker):
    signals = extract_page_signals(f"<html>{marker} \"isLiveContent\":true</html>")
    assert signals.unavailable is True
    assert signals.is_live is False


def test_live_page_extracts_title_and_author():
    signals = extract_page_signals(LIVE_PAGE)
    assert signals.is_live is True
    assert signals.title == "Concerto in diretta"
    assert signals.author == "Canale Musica"
    assert signals.markers_version == PAGE_MARKERS_VERSION


def test_vod_page_is_not_live_and_title_is_unescaped():
    signals = extract_page_signals(VOD_PAGE)
    assert signals.is_live is False
    assert signals.unavailable is False
    assert signals.title == "Tutorial Python & Flask"
    assert signals.author == "Dev Italia"


def test_missing_title_and_author_are_none():
    signals = extract_page_signals("<html><body>niente di utile</body></html>")
    assert signals.title is None
    assert signals.author is None


def test_empty_page():
    signals = extract_page_signals("")
    assert signals.unavailable is False
    assert signals.is_live is False


def test_only_first_title_suffix_is_stripped():
    signals = extract_page_signals("<html><title>Why - YouTube - YouTube</title></html>")
    assert signals.title == "Why - YouTube"
