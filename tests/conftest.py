import os
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Export the selected environment so settings and logging pick the matching
    defaults (log level, renderer).
    """
    os.environ["ENVIRONMENT"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)


@pytest.fixture()
def engine():
    """A fresh in-memory database per test."""
    from shared.database import build_engine, drop_db, setup_db

    engine = build_engine("sqlite://")
    setup_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker[Session]:
    from shared.database import build_session_factory

    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def settings(tmp_path):
    from payments.gateway.settings import GatewaySettings
    from shared.settings import Settings

    return Settings(
        environment="test",
        database_url="sqlite://",
        charge_timeout=1.0,
        persist_attempts=3,
        log_dir=str(tmp_path / "logs"),
        gateway=GatewaySettings(gateway="fake"),
    )


@pytest.fixture()
def fake_gateway():
    from payments.gateway.fake_adapter import FakeGateway

    return FakeGateway()


@pytest.fixture()
def client(settings, fake_gateway):
    """TestClient over the full application, lifespan included."""
    from app import create_app
    from fastapi.testclient import TestClient

    with TestClient(create_app(settings=settings, gateway=fake_gateway)) as client:
        yield client
