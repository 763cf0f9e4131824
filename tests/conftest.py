"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from takehome.backend.app import create_app  # noqa: E402
from takehome.backend.app.services.engine import TaxEngine  # noqa: E402
from takehome.backend.config.year_config import (  # noqa: E402
    YearConfiguration,
    load_year_configuration,
)


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch) -> Flask:
    """Return a configured Flask application for integration tests."""

    monkeypatch.setenv("TAKEHOME_ALLOWED_ORIGINS", "http://localhost:5173")
    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def config_2025() -> YearConfiguration:
    return load_year_configuration(2025)


@pytest.fixture()
def engine(config_2025: YearConfiguration) -> TaxEngine:
    return TaxEngine(config_2025)
