"""Common test fixtures for the Quillnote service."""
import pytest

from quillnote.config import AIConfig
from tests.fakes import FakeUpstream

UPSTREAM_BASE = "https://upstream.test/v1"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's provider credentials out of the tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_MODEL", raising=False)


@pytest.fixture
def ai_settings():
    return AIConfig(api_key="sk-test", model="test-model", base_url=UPSTREAM_BASE)


@pytest.fixture
def upstream():
    return FakeUpstream()
