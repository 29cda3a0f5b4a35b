import requests
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class YouTubeClient:
    """
    Client HTTP verso gli endpoint pubblici di YouTube: oEmbed per i metadati
    e la pagina watch per lo scraping dei segnali di diretta.
    """
    def __init__(self, oembed_url: str, watch_url: str, oembed_user_agent: str,
                 browser_user_agent: str, timeout: float = 10):
        """
        Args:
            oembed_url (str): Endpoint oEmbed (es. "https://www.youtube.com/oembed").
            watch_url (str): URL base della pagina watch (es. "https://www.youtube.com/watch").
            oembed_user_agent (str): User-Agent usato verso oEmbed.
            browser_user_agent (str): User-Agent da browser desktop per la pagina watch.
            timeout (float): Timeout in secondi per ogni richiesta.
        """
        self.oembed_url = oembed_url
        self.watch_url = watch_url
        self.timeout = timeout
        self.oembed_headers = {'User-Agent': oembed_user_agent}
        self.page_headers = {
            'User-Agent': browser_user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }

    @classmethod
    def from_config(cls, config) -> "YouTubeClient":
        return cls(
            oembed_url=config.get('YOUTUBE_OEMBED_URL', 'https://www.youtube.com/oembed'),
            watch_url=config.get('YOUTUBE_WATCH_URL', 'https://www.youtube.com/watch'),
            oembed_user_agent=config.get('OEMBED_USER_AGENT', 'Mozilla/5.0'),
            browser_user_agent=config.get('BROWSER_USER_AGENT', 'Mozilla/5.0'),
            timeout=config.get('HTTP_TIMEOUT_SECONDS', 10),
        )

    def get_oembed(self, video_id: str) -> Optional[Dict]:
        """
        Interroga oEmbed. Restituisce il payload JSON se la risposta è 2xx, altrimenti None.
        oEmbed serve solo video completamente elaborati, mai dirette in corso.
        Solleva requests.exceptions.RequestException in caso di errore di rete.
        """
        params = {'url': f"{self.watch_url}?v={video_id}", 'format': 'json'}
        logger.info(f"[{video_id}] Interrogo oEmbed: {self.oembed_url}")
        response = requests.get(self.oembed_url, headers=self.oembed_headers, params=params, timeout=self.timeout)
        logger.info(f"[{video_id}] Risposta oEmbed: HTTP {response.status_code}")

        if not response.ok:
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"[{video_id}] Risposta oEmbed non è JSON valido: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"[{video_id}] Risposta oEmbed inattesa (tipo {type(data).__name__}), la ignoro.")
            return None
        return data

    def get_watch_page(self, video_id: str) -> requests.Response:
        """
        Scarica l'HTML della pagina watch fingendosi un browser.
        Solleva requests.exceptions.RequestException in caso di errore di rete.
        """
        logger.info(f"[{video_id}] Scarico la pagina watch: {self.watch_url}?v={video_id}")
        response = requests.get(self.watch_url, headers=self.page_headers, params={'v': video_id}, timeout=self.timeout)
        logger.info(f"[{video_id}] Risposta pagina watch: HTTP {response.status_code}")
        return response
