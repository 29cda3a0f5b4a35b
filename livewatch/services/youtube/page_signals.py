# FILE: livewatch/services/youtube/page_signals.py
import re
import html
import logging
from dataclasses import dataclass
from typing import Optional
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Versione dell'insieme di marcatori qui sotto.
# Va incrementata ogni volta che YouTube cambia il markup e i marcatori vengono aggiornati.
PAGE_MARKERS_VERSION = "2024.1"

UNAVAILABLE_MARKERS = (
    'Video unavailable',
    '"status":"ERROR"',
)

LIVE_MARKERS = (
    '"isLiveContent":true',
    'BADGE_STYLE_TYPE_LIVE_NOW',
    '"isLiveBroadcast":true',
    '"isLive":true',
)

TITLE_SUFFIX = ' - YouTube'
AUTHOR_PATTERN = re.compile(r'"author":"([^"]+)"')


@dataclass
class PageSignals:
    """Segnali estratti dall'HTML di una pagina watch."""
    unavailable: bool
    is_live: bool
    title: Optional[str] = None
    author: Optional[str] = None
    markers_version: str = PAGE_MARKERS_VERSION


def _extract_title(page_text: str) -> Optional[str]:
    soup = BeautifulSoup(page_text, 'html.parser')
    if not soup.title or not soup.title.string:
        return None
    title = soup.title.string.replace(TITLE_SUFFIX, '', 1).strip()
    return title or None


def _extract_author(page_text: str) -> Optional[str]:
    match = AUTHOR_PATTERN.search(page_text)
    if not match:
        return None
    return html.unescape(match.group(1))


def extract_page_signals(page_text: str) -> PageSignals:
    """
    Analizza l'HTML della pagina watch e restituisce i segnali utili:
    video non disponibile, diretta in corso, titolo e autore (best-effort).
    """
    page_text = page_text or ''

    unavailable = any(marker in page_text for marker in UNAVAILABLE_MARKERS)
    if unavailable:
        logger.info(f"Marcatore 'non disponibile' trovato (marcatori v{PAGE_MARKERS_VERSION}).")
        return PageSignals(unavailable=True, is_live=False)

    matched_live = [marker for marker in LIVE_MARKERS if marker in page_text]
    if matched_live:
        logger.debug(f"Marcatori live trovati: {matched_live}")

    return PageSignals(
        unavailable=False,
        is_live=bool(matched_live),
        title=_extract_title(page_text),
        author=_extract_author(page_text),
    )
