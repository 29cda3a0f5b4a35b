import logging
import requests
from typing import Optional

from livewatch.api.models.video import VideoStatus, DEFAULT_VIDEO_TITLE, DEFAULT_VIDEO_AUTHOR
from livewatch.config import PAGE_FETCH_POLICY_ASSUME_LIVE, PAGE_FETCH_POLICY_REPORT_FAILURE
from livewatch.services.youtube.client import YouTubeClient
from livewatch.services.youtube.page_signals import extract_page_signals

logger = logging.getLogger(__name__)


def _check_with_oembed(video_id: str, youtube_client: YouTubeClient) -> Optional[VideoStatus]:
    """Primo livello: se oEmbed risponde, il video è disponibile e NON è in diretta."""
    try:
        data = youtube_client.get_oembed(video_id)
    except requests.exceptions.RequestException as e:
        logger.info(f"[{video_id}] oEmbed non raggiungibile: {e}")
        return None

    if data is None:
        return None

    logger.info(f"[{video_id}] oEmbed OK - video disponibile (non live).")
    return VideoStatus(
        valid=True,
        title=data.get('title'),
        author=data.get('author_name'),
        is_live=False,
    )


def _check_with_page(video_id: str, youtube_client: YouTubeClient, failure_policy: str) -> VideoStatus:
    """Secondo livello: scraping della pagina watch alla ricerca dei marcatori."""
    try:
        response = youtube_client.get_watch_page(video_id)
    except requests.exceptions.RequestException as e:
        logger.error(f"[{video_id}] Errore di rete scaricando la pagina watch: {e}")
        if failure_policy == PAGE_FETCH_POLICY_REPORT_FAILURE:
            return VideoStatus(valid=False, error=f"Failed to check video status: {e}")
        # assume_live: meglio continuare il polling che fallire subito
        return VideoStatus(valid=True, title=DEFAULT_VIDEO_TITLE, author=DEFAULT_VIDEO_AUTHOR, is_live=True)

    if not response.ok:
        logger.error(f"[{video_id}] Pagina watch non disponibile (HTTP {response.status_code}).")
        return VideoStatus(valid=False, error='Video not found')

    signals = extract_page_signals(response.text)
    if signals.unavailable:
        return VideoStatus(valid=False, error='Video not found or unavailable')

    logger.info(f"[{video_id}] Pagina analizzata: live={signals.is_live}")
    return VideoStatus(
        valid=True,
        title=signals.title or DEFAULT_VIDEO_TITLE,
        author=signals.author or DEFAULT_VIDEO_AUTHOR,
        is_live=signals.is_live,
    )


def check_video_status(video_id: str, youtube_client: YouTubeClient,
                       failure_policy: str = PAGE_FETCH_POLICY_ASSUME_LIVE) -> VideoStatus:
    """
    Determina se il video esiste e se è una diretta in corso.
    Prima oEmbed, poi (se fallisce) lo scraping della pagina watch.
    Nessun risultato viene messo in cache.
    """
    logger.info(f"Controllo stato video: {video_id}")

    status = _check_with_oembed(video_id, youtube_client)
    if status is not None:
        return status

    return _check_with_page(video_id, youtube_client, failure_policy)
