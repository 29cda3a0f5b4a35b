import logging

from livewatch.api.models.video import DownloadResolution
from livewatch.utils import build_watch_url

logger = logging.getLogger(__name__)

DOWNLOAD_HINT_MESSAGE = 'Use a YouTube downloader service with this URL'


def resolve_download(video_id: str) -> DownloadResolution:
    """
    Restituisce l'URL canonico del video. Nessun download reale:
    l'utente usa un servizio esterno con questo URL.
    """
    download_url = build_watch_url(video_id)
    logger.info(f"[{video_id}] URL di download risolto: {download_url}")
    return DownloadResolution(
        success=True,
        video_id=video_id,
        download_url=download_url,
        message=DOWNLOAD_HINT_MESSAGE,
    )
