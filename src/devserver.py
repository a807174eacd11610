"""Local development backend for the storefront client.

Serves the FastAPI stub over a seeded FakeBackend (one demo store, two
products). Point ``STOREFRONT_API_URL`` at it to run the client end to end.

Usage:
    uvicorn devserver:app --app-dir src --host 0.0.0.0 --port 4000
"""

from storefront.api.fake_backend import FakeBackend
from storefront.api.stub_server import create_stub_app
from storefront.config import Settings
from storefront.domain import storefront
from storefront.utils.logging import configure_logging

configure_logging(Settings.from_env().log_level)

storefront.init()

app = create_stub_app(FakeBackend.seeded())
