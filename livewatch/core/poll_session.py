# FILE: livewatch/core/poll_session.py
import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.base import JobLookupError

from livewatch.api.models.video import VideoStatus, DownloadResolution
from livewatch.utils import extract_video_id

logger = logging.getLogger(__name__)

MSG_EMPTY_URL = 'Please enter a YouTube URL'
MSG_INVALID_URL = 'Invalid YouTube URL. Please check and try again.'
MSG_INVALID_VIDEO = 'Invalid YouTube video or video not found'
MSG_DOWNLOAD_FAILED = 'Failed to process video'
MSG_DOWNLOAD_REQUEST_FAILED = 'Failed to process download request'


class SessionStatus(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    LIVE = 'live'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    ERROR = 'error'


@dataclass
class VideoInfo:
    title: Optional[str] = None
    author: Optional[str] = None
    download_url: Optional[str] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Copia immutabile dello stato, passata ai listener."""
    session_id: str
    status: SessionStatus
    video_id: Optional[str]
    info: VideoInfo = field(default_factory=VideoInfo)


class PollSession:
    """
    Orchestrazione lato client: valida l'URL, controlla lo stato del video,
    se è in diretta ricontrolla ogni N secondi e alla fine risolve l'URL del video.

    Stati: idle -> validating -> (live | processing) -> (completed | error).
    Ogni job pianificato porta con sé la "generazione" della sessione: reset() la
    incrementa, quindi job e risposte arrivati in ritardo vengono ignorati.
    """

    def __init__(self,
                 check_video: Callable[[str], VideoStatus],
                 download_video: Callable[[str], DownloadResolution],
                 scheduler: Optional[BackgroundScheduler] = None,
                 poll_interval_seconds: float = 5,
                 processing_delay_seconds: float = 2,
                 on_change: Optional[Callable[[SessionSnapshot], None]] = None,
                 session_id: Optional[str] = None):
        self._check_video = check_video
        self._download_video = download_video
        self.poll_interval_seconds = poll_interval_seconds
        self.processing_delay_seconds = processing_delay_seconds
        self.on_change = on_change
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or BackgroundScheduler(timezone="Europe/Rome")

        self._lock = threading.Lock()
        self._generation = 0
        self._poll_job_id: Optional[str] = None
        self._processing_job_id: Optional[str] = None

        self.status = SessionStatus.IDLE
        self.video_id: Optional[str] = None
        self.info = VideoInfo()

    # --- Costruttori di comodo ---
    @classmethod
    def from_api_client(cls, api_client, **kwargs) -> "PollSession":
        """Sessione che parla con il servizio via HTTP (LiveWatchApiClient)."""
        return cls(check_video=api_client.check_video, download_video=api_client.download_video, **kwargs)

    @classmethod
    def from_config(cls, config, **kwargs) -> "PollSession":
        """Sessione che usa direttamente i servizi in-process, senza passare dalle API."""
        from livewatch.core.status_checker import check_video_status
        from livewatch.core.download_resolver import resolve_download
        from livewatch.services.youtube.client import YouTubeClient

        youtube_client = YouTubeClient.from_config(config)
        failure_policy = config.get('PAGE_FETCH_FAILURE_POLICY', 'assume_live')
        kwargs.setdefault('poll_interval_seconds', config.get('POLL_INTERVAL_SECONDS', 5))
        kwargs.setdefault('processing_delay_seconds', config.get('PROCESSING_DELAY_SECONDS', 2))
        return cls(
            check_video=lambda video_id: check_video_status(video_id, youtube_client, failure_policy=failure_policy),
            download_video=resolve_download,
            **kwargs
        )

    # --- Stato ---
    @property
    def is_busy(self) -> bool:
        return self.status in (SessionStatus.VALIDATING, SessionStatus.LIVE, SessionStatus.PROCESSING)

    @property
    def has_active_timer(self) -> bool:
        return self._poll_job_id is not None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            status=self.status,
            video_id=self.video_id,
            info=copy.copy(self.info),
        )

    def _notify(self, snapshot: SessionSnapshot):
        if not self.on_change:
            return
        try:
            self.on_change(snapshot)
        except Exception:
            logger.exception(f"[Sessione {self.session_id}] Errore nel listener on_change.")

    def _set_error_locked(self, message: str):
        self.status = SessionStatus.ERROR
        self.info.error_message = message

    # --- Operazioni ---
    def submit(self, url: str) -> SessionStatus:
        """
        Avvia il controllo di un URL. Se la sessione è già impegnata viene prima resettata.
        Il controllo iniziale è sincrono; il polling delle dirette gira sullo scheduler.
        """
        if self.status != SessionStatus.IDLE:
            self.reset()

        with self._lock:
            self._generation += 1
            generation = self._generation

            if not url or not url.strip():
                self.info = VideoInfo()
                self._set_error_locked(MSG_EMPTY_URL)
                snapshot = self._snapshot_locked()
            else:
                video_id = extract_video_id(url)
                if not video_id:
                    logger.info(f"[Sessione {self.session_id}] URL non riconosciuto: '{url}'")
                    self.info = VideoInfo()
                    self._set_error_locked(MSG_INVALID_URL)
                    snapshot = self._snapshot_locked()
                else:
                    self.video_id = video_id
                    self.info = VideoInfo()
                    self.status = SessionStatus.VALIDATING
                    snapshot = self._snapshot_locked()

        self._notify(snapshot)
        if snapshot.status == SessionStatus.ERROR:
            return snapshot.status

        video_id = snapshot.video_id
        logger.info(f"[Sessione {self.session_id}] Validazione video {video_id}...")
        try:
            result = self._check_video(video_id)
        except Exception as e:
            logger.error(f"[Sessione {self.session_id}] Controllo iniziale fallito per {video_id}: {e}")
            result = None

        start_processing = False
        with self._lock:
            if generation != self._generation:
                logger.info(f"[Sessione {self.session_id}] Risposta obsoleta per {video_id} ignorata.")
                return self.status

            if result is None or not result.valid:
                self._set_error_locked(MSG_INVALID_VIDEO)
            else:
                self.info.title = result.title
                self.info.author = result.author
                if result.is_live:
                    self.status = SessionStatus.LIVE
                    self._schedule_poll_locked(generation)
                else:
                    start_processing = True
            snapshot = self._snapshot_locked()

        if start_processing:
            self._start_processing(generation)
        else:
            self._notify(snapshot)
        return self.status

    def reset(self):
        """Annulla timer e job in sospeso, azzera lo stato e torna a idle. Idempotente."""
        with self._lock:
            self._generation += 1
            self._cancel_jobs_locked()
            self.status = SessionStatus.IDLE
            self.video_id = None
            self.info = VideoInfo()
            snapshot = self._snapshot_locked()
        logger.info(f"[Sessione {self.session_id}] Sessione resettata.")
        self._notify(snapshot)

    def shutdown(self):
        """Resetta la sessione e spegne lo scheduler se è stato creato da questa sessione."""
        self.reset()
        if self._owns_scheduler and self._scheduler.running:
            logger.info(f"[Sessione {self.session_id}] Spegnimento scheduler della sessione...")
            self._scheduler.shutdown(wait=False)

    # --- Scheduler ---
    def _ensure_scheduler_running(self):
        if self._owns_scheduler and not self._scheduler.running:
            self._scheduler.start()

    def _remove_job(self, job_id: Optional[str]):
        if not job_id:
            return
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            # Job già eseguito (date trigger) o già rimosso
            pass

    def _cancel_jobs_locked(self):
        self._remove_job(self._poll_job_id)
        self._remove_job(self._processing_job_id)
        self._poll_job_id = None
        self._processing_job_id = None

    def _schedule_poll_locked(self, generation: int):
        # Al massimo un timer attivo per sessione
        self._remove_job(self._poll_job_id)
        self._ensure_scheduler_running()
        job_id = f"livewatch-poll-{self.session_id}-{generation}"
        self._scheduler.add_job(
            func=self._poll_tick,
            trigger='interval',
            seconds=self.poll_interval_seconds,
            args=[generation],
            id=job_id,
            name=f"Polling diretta {self.video_id}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._poll_job_id = job_id
        logger.info(f"[Sessione {self.session_id}] Video {self.video_id} in diretta. Ricontrollo ogni {self.poll_interval_seconds}s.")

    def _poll_tick(self, generation: int):
        with self._lock:
            if generation != self._generation or self.status != SessionStatus.LIVE:
                return
            video_id = self.video_id

        try:
            result = self._check_video(video_id)
            still_live = bool(result.is_live) if result.valid else False
        except Exception as e:
            # Un ricontrollo fallito conta come "non più live"
            logger.warning(f"[Sessione {self.session_id}] Ricontrollo fallito per {video_id}: {e}")
            still_live = False

        with self._lock:
            if generation != self._generation or self.status != SessionStatus.LIVE:
                return
            if still_live:
                logger.debug(f"[Sessione {self.session_id}] {video_id} ancora in diretta.")
                return
            self._remove_job(self._poll_job_id)
            self._poll_job_id = None

        logger.info(f"[Sessione {self.session_id}] Diretta terminata per {video_id}.")
        self._start_processing(generation)

    def _start_processing(self, generation: int):
        with self._lock:
            if generation != self._generation:
                return
            self.status = SessionStatus.PROCESSING
            self._ensure_scheduler_running()
            job_id = f"livewatch-processing-{self.session_id}-{generation}"
            run_date = datetime.now(timezone.utc) + timedelta(seconds=self.processing_delay_seconds)
            self._scheduler.add_job(
                func=self._finish_processing,
                trigger='date',
                run_date=run_date,
                args=[generation],
                id=job_id,
                name=f"Risoluzione download {self.video_id}",
                replace_existing=True,
                misfire_grace_time=None,
            )
            self._processing_job_id = job_id
            snapshot = self._snapshot_locked()
        self._notify(snapshot)

    def _finish_processing(self, generation: int):
        with self._lock:
            if generation != self._generation or self.status != SessionStatus.PROCESSING:
                return
            video_id = self.video_id
            self._processing_job_id = None

        try:
            resolution = self._download_video(video_id)
            error_message = None
        except Exception as e:
            logger.error(f"[Sessione {self.session_id}] Risoluzione download fallita per {video_id}: {e}")
            resolution = None
            error_message = MSG_DOWNLOAD_REQUEST_FAILED

        with self._lock:
            if generation != self._generation:
                return
            if resolution is not None and resolution.success:
                self.status = SessionStatus.COMPLETED
                self.info.download_url = resolution.download_url
                logger.info(f"[Sessione {self.session_id}] Completato: {resolution.download_url}")
            else:
                if resolution is not None:
                    error_message = resolution.error or MSG_DOWNLOAD_FAILED
                self._set_error_locked(error_message)
            snapshot = self._snapshot_locked()
        self._notify(snapshot)
