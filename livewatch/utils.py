import re
import logging
from typing import Optional


logger = logging.getLogger(__name__)

CANONICAL_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# L'ordine conta: vince il primo pattern che trova un ID
VIDEO_ID_PATTERNS = [
    re.compile(r'(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/live/)([^&\s]+)'),
    re.compile(r'youtube\.com/embed/([^&\s]+)'),
]


def extract_video_id(youtube_url: str) -> Optional[str]:
    """
    Estrae l'ID del video da un URL di YouTube incollato dall'utente.
    Formati supportati: watch?v=, youtu.be/, youtube.com/live/, youtube.com/embed/.
    Nessuna normalizzazione oltre al confine della regex.
    """
    if not youtube_url or not isinstance(youtube_url, str):
        return None

    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(youtube_url)
        if match:
            return match.group(1)

    logger.debug(f"Nessun ID video trovato in: '{youtube_url}'")
    return None


def build_watch_url(video_id: str) -> str:
    """URL canonico della pagina watch per un ID video."""
    return CANONICAL_WATCH_URL.format(video_id=video_id)
