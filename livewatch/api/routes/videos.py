import logging
from flask import Blueprint, jsonify, request, current_app

# --- Import Servizi e Moduli App ---
from livewatch.core.status_checker import check_video_status
from livewatch.core.download_resolver import resolve_download
from livewatch.services.youtube.client import YouTubeClient

# --- Setup Logger e Blueprint ---
logger = logging.getLogger(__name__)
videos_bp = Blueprint('videos', __name__)


def _read_video_id():
    """
    Legge 'videoId' dal corpo JSON.
    Restituisce (video_id, None) oppure (None, messaggio_errore).
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, 'Invalid request body'
    video_id = data.get('videoId')
    if not video_id or not isinstance(video_id, str) or not video_id.strip():
        return None, 'Video ID is required'
    return video_id.strip(), None


# --- Route Controllo Stato Video ---
@videos_bp.route('/check-video', methods=['POST'])
def check_video():
    """
    Verifica se il video esiste e se è una diretta in corso.
    Gli errori "di dominio" sono riportati nel corpo con HTTP 200.
    """
    video_id, error_message = _read_video_id()
    if error_message:
        logger.warning(f"[Check Video] Richiesta non valida: {error_message}")
        return jsonify({'error': error_message, 'isValid': False}), 400

    logger.info(f"[Check Video] Richiesta per video ID: {video_id}")
    try:
        youtube_client = YouTubeClient.from_config(current_app.config)
        failure_policy = current_app.config.get('PAGE_FETCH_FAILURE_POLICY', 'assume_live')
        status = check_video_status(video_id, youtube_client, failure_policy=failure_policy)
        return jsonify(status.to_response()), 200
    except Exception as e:
        logger.exception(f"[Check Video] Errore imprevisto per {video_id}")
        return jsonify({
            'isValid': False,
            'valid': False,
            'error': f'Failed to check video status: {e}'
        }), 500


# --- Route Risoluzione Download ---
@videos_bp.route('/download-video', methods=['POST'])
def download_video():
    """Restituisce l'URL canonico del video (nessun download reale)."""
    video_id = None
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            # Corpo illeggibile: trattato come errore del server, non come richiesta incompleta
            raise ValueError("Corpo della richiesta non leggibile come oggetto JSON")
        video_id = data.get('videoId')
        if not video_id or not isinstance(video_id, str) or not video_id.strip():
            logger.warning("[Download Video] Richiesta non valida: Video ID mancante")
            return jsonify({'error': 'Video ID is required'}), 400
        video_id = video_id.strip()

        resolution = resolve_download(video_id)
        return jsonify(resolution.to_response()), 200
    except Exception:
        logger.exception(f"[Download Video] Errore imprevisto per {video_id}")
        return jsonify({'error': 'Failed to process download request'}), 500
