from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from rawprinter.config import get_settings
from rawprinter.main import create_app
from rawprinter.services.jobs.store import JobStore

SAMPLE_JOB = (
    b'\x1b%-12345X@PJL JOB NAME="Test"\r\n'
    b"@PJL USTATUS JOB=ON\r\n"
    b"hello\r\n"
    b"@PJL EOJ NAME\r\n"
    b"\x1b%-12345X"
)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_job() -> bytes:
    return SAMPLE_JOB


@pytest.fixture
def store() -> JobStore:
    return JobStore()


@pytest.fixture
def client(store: JobStore) -> Iterator[TestClient]:
    with TestClient(create_app(store)) as test_client:
        yield test_client
