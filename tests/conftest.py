import pytest

from interview_assistant.config import get_settings
from tests.fakes import Harness


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def harness() -> Harness:
    return Harness()
