import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Sets the config environment, and a low bcrypt work factor so that
    registering accounts in tests stays fast. Both must be in place before
    the backend modules are imported.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("BCRYPT_ROUNDS", "4")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def backend_bed():
    from protean.integrations.pytest import DomainFixture

    from backend.domain import backend

    bed = DomainFixture(backend)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(backend_bed):
    """Run every test inside the backend's domain context, on clean storage."""
    from protean import current_domain

    with backend_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
