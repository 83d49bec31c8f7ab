import logging
import os
from datetime import datetime, timedelta

import pytest

# Set test environment variables before dweetr.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from dweetr.core.store import MessageStore  # noqa: E402
from dweetr.infra.database import create_db_engine  # noqa: E402
from dweetr.main import build_service, create_app  # noqa: E402


class FakeClock:
    """Settable wall clock for stamping dweets with synthetic times."""

    def __init__(self, start: datetime = datetime(2025, 5, 3, 16, 30)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Keep test runs from writing log files."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    for h in saved:
        root.addHandler(h)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'dweetr.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine, clock):
    store = MessageStore(engine, clock=clock)
    store.create_schema()
    return store


@pytest.fixture
def service(store):
    return build_service(
        store,
        listen_max_wait=0.6,
        listen_poll_interval=0.05,
        listen_deadline=5,
    )


@pytest.fixture
def client(service):
    app = create_app(service=service, configure_logging=False)
    app.state.limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
