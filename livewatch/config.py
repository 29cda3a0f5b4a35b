import os
from dotenv import load_dotenv

app_dir = os.path.abspath(os.path.dirname(__file__))
basedir = os.path.dirname(app_dir)

dotenv_path = os.path.join(basedir, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
    print(f"Caricate variabili d'ambiente da: {dotenv_path}") # Log conferma
else:
    print(f"Attenzione: File .env non trovato in {basedir}")


# Politiche ammesse quando il download della pagina di YouTube fallisce per errore di rete
PAGE_FETCH_POLICY_ASSUME_LIVE = 'assume_live'
PAGE_FETCH_POLICY_REPORT_FAILURE = 'report_failure'
PAGE_FETCH_POLICIES = [PAGE_FETCH_POLICY_ASSUME_LIVE, PAGE_FETCH_POLICY_REPORT_FAILURE]


class BaseConfig:
    """Configurazione di base da cui le altre ereditano."""

    SECRET_KEY = os.environ.get('FLASK_SECRET_KEY')
    BASE_DIR = basedir

    # --- Endpoint esterni di YouTube ---
    YOUTUBE_OEMBED_URL = os.environ.get('YOUTUBE_OEMBED_URL', 'https://www.youtube.com/oembed')
    YOUTUBE_WATCH_URL = os.environ.get('YOUTUBE_WATCH_URL', 'https://www.youtube.com/watch')

    # oEmbed risponde meglio a un crawler, la pagina watch invece va chiesta "da browser"
    OEMBED_USER_AGENT = 'Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)'
    BROWSER_USER_AGENT = os.environ.get(
        'BROWSER_USER_AGENT',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    )

    HTTP_TIMEOUT_SECONDS_STR = os.environ.get('HTTP_TIMEOUT_SECONDS', '10')
    try:
        HTTP_TIMEOUT_SECONDS = float(HTTP_TIMEOUT_SECONDS_STR)
        if HTTP_TIMEOUT_SECONDS <= 0:
            raise ValueError("Il timeout deve essere positivo.")
    except (ValueError, TypeError):
        print(f"ATTENZIONE: HTTP_TIMEOUT_SECONDS ('{HTTP_TIMEOUT_SECONDS_STR}') non valido. Uso '10'.")
        HTTP_TIMEOUT_SECONDS = 10.0

    # --- Impostazioni Polling ---
    POLL_INTERVAL_SECONDS_STR = os.environ.get('POLL_INTERVAL_SECONDS', '5')
    try:
        POLL_INTERVAL_SECONDS = int(POLL_INTERVAL_SECONDS_STR)
        if POLL_INTERVAL_SECONDS <= 0:
            raise ValueError("L'intervallo deve essere positivo.")
    except (ValueError, TypeError):
        print(f"ATTENZIONE: POLL_INTERVAL_SECONDS ('{POLL_INTERVAL_SECONDS_STR}') non valido. Uso '5'.")
        POLL_INTERVAL_SECONDS = 5

    PROCESSING_DELAY_SECONDS_STR = os.environ.get('PROCESSING_DELAY_SECONDS', '2')
    try:
        PROCESSING_DELAY_SECONDS = float(PROCESSING_DELAY_SECONDS_STR)
        if PROCESSING_DELAY_SECONDS < 0:
            raise ValueError("Il ritardo non può essere negativo.")
    except (ValueError, TypeError):
        print(f"ATTENZIONE: PROCESSING_DELAY_SECONDS ('{PROCESSING_DELAY_SECONDS_STR}') non valido. Uso '2'.")
        PROCESSING_DELAY_SECONDS = 2.0

    # Cosa rispondere se la pagina watch non è raggiungibile (errore di rete):
    # 'assume_live' continua il polling, 'report_failure' restituisce un errore esplicito
    PAGE_FETCH_FAILURE_POLICY = os.environ.get('PAGE_FETCH_FAILURE_POLICY', PAGE_FETCH_POLICY_ASSUME_LIVE).lower()
    if PAGE_FETCH_FAILURE_POLICY not in PAGE_FETCH_POLICIES:
        print(f"ATTENZIONE: PAGE_FETCH_FAILURE_POLICY ('{PAGE_FETCH_FAILURE_POLICY}') non valida. Uso '{PAGE_FETCH_POLICY_ASSUME_LIVE}'. Validi: {PAGE_FETCH_POLICIES}")
        PAGE_FETCH_FAILURE_POLICY = PAGE_FETCH_POLICY_ASSUME_LIVE


class DevelopmentConfig(BaseConfig):
    """Configurazione per lo sviluppo."""
    DEBUG = True


class ProductionConfig(BaseConfig):
    """Configurazione per la produzione."""
    DEBUG = False


class TestConfig(DevelopmentConfig):
    """Configurazione per i test."""
    TESTING = True
    SECRET_KEY = 'test_secret_key'
    # Nessuna chiamata reale: i test sostituiscono requests con dei mock
    HTTP_TIMEOUT_SECONDS = 1.0
    PAGE_FETCH_FAILURE_POLICY = PAGE_FETCH_POLICY_ASSUME_LIVE


# Dizionario per selezionare la configurazione
config_by_name = dict(
    development=DevelopmentConfig,
    production=ProductionConfig,
    test=TestConfig,
    default=DevelopmentConfig
)
