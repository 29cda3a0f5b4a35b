import pytest
from unittest.mock import MagicMock
import logging

# Importa dall'applicazione. Assicurati che il pacchetto sia installato
# (pip install -e .) o che pytest sia eseguito dalla radice del progetto.
from livewatch.main import create_app
from livewatch.config import TestConfig

logger = logging.getLogger(__name__)

@pytest.fixture(scope='session')
def app():
    test_config_instance = TestConfig()
    flask_app = create_app(test_config_instance)
    logger.info("CONFTEST: App di test creata.")
    yield flask_app
    logger.info("CONFTEST: Teardown for session-scoped app fixture.")

@pytest.fixture(scope='function') # 'function' scope è corretto per client per isolamento
def client(app):
    return app.test_client()


@pytest.fixture
def fake_response():
    """Risposta finta di requests con i soli attributi usati dal codice."""
    def _make(status_code=200, json_data=None, text=''):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.text = text
        if json_data is None:
            response.json.side_effect = ValueError("No JSON")
        else:
            response.json.return_value = json_data
        return response
    return _make
