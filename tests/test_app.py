from livewatch.config import TestConfig
from livewatch.main import create_app


def test_index_page_loads(client): # client ora viene da conftest.py
    response = client.get('/')
    assert response.status_code == 200
    assert response.json['endpoints']['check_video'] == '/api/check-video'
    assert response.json['poll_interval_seconds'] == 5


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.json == {'status': 'ok'}


def test_cors_headers_on_api(client):
    response = client.post('/api/download-video', json={'videoId': 'abc123'}, headers={'Origin': 'https://example.test'})
    assert response.headers.get('Access-Control-Allow-Origin') == '*'


def test_create_app_with_custom_config():
    """Ogni chiamata a create_app produce un'app indipendente con la propria configurazione."""
    class SlowPollConfig(TestConfig):
        POLL_INTERVAL_SECONDS = 30

    app = create_app(SlowPollConfig())
    assert app.config['TESTING'] is True
    assert app.config['POLL_INTERVAL_SECONDS'] == 30
