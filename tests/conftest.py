from __future__ import annotations

import pytest

from completion_runner.common.config import Credentials


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(key="test-key", endpoint="https://example.openai.azure.com")


@pytest.fixture
def language_credentials() -> Credentials:
    return Credentials(key="lang-key", endpoint="https://example.cognitiveservices.azure.com")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for var in (
        "AZURE_OPENAI_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
        "AZURE_OPENAI_API_VERSION",
        "LANGUAGE_KEY",
        "LANGUAGE_ENDPOINT",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
