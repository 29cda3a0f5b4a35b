# --- Import Standard ---
import os
import sys
import logging

# --- Import Flask e Correlati ---
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from dotenv import load_dotenv

# --- Caricamento Configurazione Centralizzata ---
load_dotenv() # Carica .env prima di importare config
try:
    from .config import config_by_name
    config_name = os.getenv('FLASK_ENV', 'default')
    AppConfig = config_by_name.get(config_name, config_by_name['default'])
    print(f"Trovata configurazione per l'ambiente: {config_name}")
except ImportError as e:
     print(f"ERRORE CRITICO: Impossibile importare la configurazione da config.py: {e}")
     sys.exit(1)

# --- Configurazione Logging (Iniziale - sarà affinata in create_app) ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# --- Factory Function per l'App Flask ---
def create_app(config_object=AppConfig):
    """Crea e configura l'istanza dell'app Flask."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Un solo proxy davanti all'app (es. Cloudflare Tunnel o nginx)
    app.wsgi_app = ProxyFix(
        app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1
    )

    # --- Configura Logging di Flask ---
    is_debug_mode = app.config.get('FLASK_DEBUG', app.config.get('DEBUG', False))
    log_level = logging.DEBUG if is_debug_mode else logging.INFO
    logging.getLogger().setLevel(log_level)

    if not logging.getLogger().hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logging.getLogger().addHandler(handler)

    logger.info(f"Logging configurato a livello: {logging.getLevelName(log_level)}")

    # Validazioni Configurazioni
    if not app.config.get('SECRET_KEY'): logger.warning("SECRET_KEY mancante. Nessuna sessione Flask è usata, ma conviene impostarla.")
    logger.info(f"Politica in caso di pagina YouTube irraggiungibile: {app.config.get('PAGE_FETCH_FAILURE_POLICY')}")

    # Abilita CORS per le API
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # Registra Blueprints
    try:
        from .api.routes.videos import videos_bp
        app.register_blueprint(videos_bp, url_prefix='/api')
        # Stesse rotte anche senza prefisso (/check-video, /download-video)
        app.register_blueprint(videos_bp, name='videos_root')
        logger.info("Blueprint Videos registrato con prefisso /api e alla radice.")
    except ImportError as e:
         logger.critical(f"Errore importazione/registrazione blueprint: {e}", exc_info=True)
         sys.exit(1)

    @app.route('/')
    def index():
        """Descrizione minima del servizio."""
        return jsonify({
            'name': 'Live VOD Watcher',
            'endpoints': {
                'check_video': '/api/check-video',
                'download_video': '/api/download-video',
                'health': '/api/health',
            },
            'poll_interval_seconds': app.config.get('POLL_INTERVAL_SECONDS'),
        })

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    return app


# --- Blocco Esecuzione Principale (__main__) ---
if __name__ == '__main__':
    app_instance = create_app(AppConfig)

    if app_instance:
        host = os.getenv('FLASK_RUN_HOST', '127.0.0.1')
        port = int(os.getenv('FLASK_RUN_PORT', 5000))
        use_debug = app_instance.config.get('DEBUG', False)

        logger.info(f"Avvio Flask DEV server http://{host}:{port} | Debug={use_debug}")
        app_instance.run(host=host, port=port, debug=use_debug, use_reloader=use_debug)
    else:
        logger.critical("Impossibile avviare: la factory create_app non ha restituito un'istanza Flask valida.")
