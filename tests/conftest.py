import os

import pytest

# Add project root to path so we can import app
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app import create_app


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')


@pytest.fixture
def sample_log_path():
    """Path to the fixture log file."""
    return os.path.join(FIXTURES_DIR, 'sample_app.log')


@pytest.fixture
def sample_log_bytes(sample_log_path):
    with open(sample_log_path, 'rb') as f:
        return f.read()


@pytest.fixture
def app():
    """Create a test Flask app with TESTING mode."""
    app, socketio = create_app(config={
        'TESTING': True,
        'MAX_UPLOAD_MB': 1,
        'BATCH_SIZE': 5,
        'APP_ENV': 'test',
    })
    return app


@pytest.fixture
def socketio(app):
    """Return the SocketIO instance."""
    return app.socketio


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
