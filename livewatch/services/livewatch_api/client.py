import requests
import logging

from livewatch.api.models.video import VideoStatus, DownloadResolution

# Logger specifico per questo client, così i log saranno chiari
logger = logging.getLogger(__name__)


class LiveWatchApiError(Exception):
    """Errore di rete o risposta non interpretabile dalle API del servizio."""


class LiveWatchApiClient:
    """
    Client per le API JSON del servizio (/check-video e /download-video).
    Usato dai client Python (bot Telegram, PollSession) quando il servizio gira altrove.
    """
    def __init__(self, base_url: str, timeout: float = 30):
        """
        Args:
            base_url (str): URL base delle API (es. "http://localhost:5000/api").
            timeout (float): Timeout in secondi per ogni richiesta.
        """
        if not base_url:
            raise ValueError("L'URL base delle API è obbligatorio.")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {'Content-Type': 'application/json', 'User-Agent': 'LiveVodWatcher/1.0'}

        logger.info(f"Client API inizializzato per: {self.base_url}")

    def _post(self, endpoint: str, video_id: str) -> dict:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = requests.post(url, headers=self.headers, json={'videoId': video_id}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Errore di rete chiamando {url}: {e}")
            raise LiveWatchApiError(f"Network error calling {endpoint}: {e}") from e

        # Gli errori di dominio arrivano nel corpo anche con 400/500: li leggiamo comunque
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Risposta non JSON da {url} (HTTP {response.status_code})")
            raise LiveWatchApiError(f"Invalid response from {endpoint} (HTTP {response.status_code})") from e

        if not isinstance(data, dict):
            raise LiveWatchApiError(f"Unexpected response shape from {endpoint}")
        logger.debug(f"Risposta da {url}: HTTP {response.status_code} {data}")
        return data

    def check_video(self, video_id: str) -> VideoStatus:
        """Chiama POST /check-video."""
        return VideoStatus.from_response(self._post('check-video', video_id))

    def download_video(self, video_id: str) -> DownloadResolution:
        """Chiama POST /download-video."""
        return DownloadResolution.from_response(self._post('download-video', video_id), video_id)
