#!/usr/bin/env python3
"""
Test configuration loading, environment overrides and validation.
"""

import pytest
import yaml

from openai_stream.config import Configuration
from openai_stream.llm.models import ProviderType

ENV_KEYS = [
    "OPENAI_API_HOST",
    "OPENAI_API_TYPE",
    "OPENAI_API_VERSION",
    "AZURE_DEPLOYMENT_ID",
    "OPENAI_ORGANIZATION",
    "OPENAI_API_KEY",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of these tests."""
    monkeypatch.setattr(Configuration, "load_env", staticmethod(lambda: None))
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def write_config(tmp_path):
    def _write(config: dict) -> str:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(config))
        return str(path)
    return _write


def test_default_config_file():
    """The packaged config describes the OpenAI flavor and the assessor policy."""
    config = Configuration()

    provider = config.get_provider_config()
    assert provider.api_type is ProviderType.OPENAI
    assert provider.chat_completions_url == "https://api.openai.com/v1/chat/completions"
    assert provider.timeout is None
    assert provider.default_api_key is None

    policy = config.get_request_policy()
    assert policy.max_tokens == 4000
    assert policy.temperature == 0
    assert policy.model == "gpt-3.5-turbo-16k"
    assert "IELTS Writing Excellence Assessor" in policy.system_prompt

    assert config.get_default_model().id == "gpt-3.5-turbo"
    assert config.get_default_temperature() == 1.0
    assert config.get_logging_config()["level"] == "INFO"


def test_environment_overrides_provider(monkeypatch, write_config):
    path = write_config({"openai": {"api_host": "https://yaml.example"}})
    monkeypatch.setenv("OPENAI_API_TYPE", "azure")
    monkeypatch.setenv("OPENAI_API_HOST", "https://res.openai.azure.com")
    monkeypatch.setenv("AZURE_DEPLOYMENT_ID", "assessor")
    monkeypatch.setenv("OPENAI_API_VERSION", "2023-05-15")
    monkeypatch.setenv("OPENAI_API_KEY", "az-key")

    provider = Configuration(path).get_provider_config()

    assert provider.api_type is ProviderType.AZURE
    assert provider.chat_completions_url == (
        "https://res.openai.azure.com/openai/deployments/assessor"
        "/chat/completions?api-version=2023-05-15"
    )
    assert provider.default_api_key == "az-key"


def test_organization_from_yaml(write_config):
    path = write_config({"openai": {"organization": "org-42"}})
    assert Configuration(path).get_provider_config().organization == "org-42"


def test_unknown_api_type_rejected(write_config):
    path = write_config({"openai": {"api_type": "anthropic"}})
    with pytest.raises(ValueError, match="api_type must be one of"):
        Configuration(path).get_provider_config()


def test_azure_requires_deployment(write_config):
    path = write_config({"openai": {"api_type": "azure"}})
    with pytest.raises(ValueError, match="azure_deployment_id"):
        Configuration(path).get_provider_config()


def test_non_mapping_config_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="must be YAML dict"):
        Configuration(str(path))


def test_request_policy_requires_explicit_config(write_config):
    path = write_config({"openai": {}})
    with pytest.raises(ValueError, match="request_policy must be explicitly configured"):
        Configuration(path).get_request_policy()

    path = write_config({"request_policy": {"max_tokens": 100}})
    with pytest.raises(ValueError, match="request_policy.temperature must be explicitly"):
        Configuration(path).get_request_policy()


def test_request_policy_nulls_defer_to_caller(write_config):
    path = write_config({"request_policy": {
        "max_tokens": 256,
        "temperature": None,
        "model": None,
        "system_prompt_file": None,
    }})
    policy = Configuration(path).get_request_policy()
    assert policy.max_tokens == 256
    assert policy.temperature is None
    assert policy.model is None
    assert policy.system_prompt is None


def test_request_policy_prompt_from_absolute_path(tmp_path, write_config):
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("You grade essays.")
    path = write_config({"request_policy": {
        "max_tokens": 100,
        "temperature": 0,
        "model": "gpt-4",
        "system_prompt_file": str(prompt),
    }})
    assert Configuration(path).get_request_policy().system_prompt == "You grade essays."


@pytest.mark.parametrize("field,value,message", [
    ("max_tokens", 0, "max_tokens must be a positive integer"),
    ("temperature", 3, "temperature must be between"),
])
def test_request_policy_range_checks(write_config, field, value, message):
    policy = {"max_tokens": 100, "temperature": 0, "model": None,
              "system_prompt_file": None}
    policy[field] = value
    path = write_config({"request_policy": policy})
    with pytest.raises(ValueError, match=message):
        Configuration(path).get_request_policy()


def test_http_timeout(write_config):
    path = write_config({"http_client": {"timeout": 30}})
    assert Configuration(path).get_provider_config().timeout == 30

    path = write_config({"http_client": {"timeout": -1}})
    with pytest.raises(ValueError, match="timeout must be positive"):
        Configuration(path).get_provider_config()


def test_default_model_and_temperature_from_env(monkeypatch, write_config):
    path = write_config({})
    monkeypatch.setenv("DEFAULT_MODEL", "gpt-4")
    monkeypatch.setenv("DEFAULT_TEMPERATURE", "0.3")

    config = Configuration(path)
    model = config.get_default_model()
    assert model.id == "gpt-4"
    assert model.token_limit == 8000
    assert config.get_default_temperature() == 0.3


def test_llm_api_key(monkeypatch, write_config):
    config = Configuration(write_config({}))
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        config.llm_api_key

    monkeypatch.setenv("OPENAI_API_KEY", "sk-live")
    assert config.llm_api_key == "sk-live"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
