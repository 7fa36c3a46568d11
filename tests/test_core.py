import logging

import pytest
from pydantic import ValidationError

from citeflow.core.config import Settings
from citeflow.core.logging import configure_logging, init_tracer, parse_otlp_headers


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("EXA_API_KEY", "SERP_API_KEY", "LLM_MODEL", "CHANNEL_CAPACITY", "LOG_LEVEL", "OTEL_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.per_retriever_limit == 5
    assert settings.combination_policy == "ranked"
    assert settings.channel_capacity == 1
    assert settings.exa_api_key is None


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("EXA_API_KEY", "exa-secret")
    monkeypatch.setenv("LLM_MODEL", "llama-3.1-8b-instant")
    monkeypatch.setenv("CHANNEL_CAPACITY", "4")

    settings = Settings(_env_file=None)

    assert settings.exa_api_key == "exa-secret"
    assert settings.llm_model == "llama-3.1-8b-instant"
    assert settings.channel_capacity == 4


def test_channel_capacity_cannot_be_zero(monkeypatch):
    monkeypatch.setenv("CHANNEL_CAPACITY", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, {}),
        ("", {}),
        ("api-key=abc", {"api-key": "abc"}),
        ("a=1, b = 2 ,broken,=nokey", {"a": "1", "b": "2"}),
        ("auth=Basic x=y", {"auth": "Basic x=y"}),
    ],
)
def test_parse_otlp_headers(raw, expected):
    assert parse_otlp_headers(raw) == expected


def test_configure_logging_quietens_http_client():
    settings = Settings(_env_file=None, log_level="debug", app_name="citeflow-test")

    logger = configure_logging(settings)

    assert logger.name == "citeflow-test"
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_tracer_disabled_by_default():
    assert init_tracer(Settings(_env_file=None)) is None
