"""Configuration management for the OpenAI streaming adapter."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from openai_stream.chat.models import FALLBACK_MODEL_ID, OpenAIModel, get_model
from openai_stream.llm.models import (
    DEFAULT_API_HOST,
    DEFAULT_API_VERSION,
    ProviderConfig,
    ProviderType,
    RequestPolicy,
)

PACKAGE_DIR = os.path.dirname(__file__)
DEFAULT_CONFIG_PATH = os.path.join(PACKAGE_DIR, "config.yaml")

# Environment variables that override keys of the "openai" section
PROVIDER_ENV_OVERRIDES = {
    "api_host": "OPENAI_API_HOST",
    "api_type": "OPENAI_API_TYPE",
    "api_version": "OPENAI_API_VERSION",
    "azure_deployment_id": "AZURE_DEPLOYMENT_ID",
    "organization": "OPENAI_ORGANIZATION",
}

MAX_TEMPERATURE = 2.0


class Configuration:
    """Manages configuration and environment variables for the adapter."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._config = self._load_yaml_config(self.config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def llm_api_key(self) -> str:
        """Get the OpenAI API key.

        Returns:
            The API key as a string.

        Raises:
            ValueError: If the API key is not found in environment variables.
        """
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "API key 'OPENAI_API_KEY' not found in environment variables"
            )
        return api_key

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_provider_config(self) -> ProviderConfig:
        """Get the API endpoint configuration.

        Returns:
            ProviderConfig with environment overrides applied.

        Raises:
            ValueError: If the API type is unknown or an Azure deployment is
                incompletely configured.
        """
        section = {**self._config.get("openai", {})}
        for key, env_key in PROVIDER_ENV_OVERRIDES.items():
            value = os.getenv(env_key)
            if value:
                section[key] = value

        api_type_name = str(section.get("api_type") or ProviderType.OPENAI.value)
        try:
            api_type = ProviderType(api_type_name.lower())
        except ValueError:
            valid = [p.value for p in ProviderType]
            raise ValueError(
                f"openai.api_type must be one of: {valid}, got '{api_type_name}'"
            ) from None

        api_host = str(section.get("api_host") or DEFAULT_API_HOST)
        api_version = str(section.get("api_version") or DEFAULT_API_VERSION)
        deployment_id = str(section.get("azure_deployment_id") or "")
        organization = str(section.get("organization") or "")

        if api_type is ProviderType.AZURE and not deployment_id:
            raise ValueError(
                "openai.azure_deployment_id (or AZURE_DEPLOYMENT_ID) must be "
                "configured when api_type is 'azure'"
            )

        return ProviderConfig(
            api_type=api_type,
            api_host=api_host,
            api_version=api_version,
            azure_deployment_id=deployment_id,
            organization=organization,
            default_api_key=os.getenv("OPENAI_API_KEY") or None,
            timeout=self.get_http_client_config().get("timeout"),
        )

    def get_request_policy(self) -> RequestPolicy:
        """Get the fixed request overrides.

        Returns:
            RequestPolicy with the system prompt loaded from its file.

        Raises:
            ValueError: If the section is missing or values are out of range.
        """
        if "request_policy" not in self._config:
            raise ValueError(
                "request_policy must be explicitly configured in config.yaml"
            )
        policy_config = self._config["request_policy"] or {}

        required_keys = ["max_tokens", "temperature", "model", "system_prompt_file"]
        for key in required_keys:
            if key not in policy_config:
                raise ValueError(
                    f"request_policy.{key} must be explicitly configured "
                    "in config.yaml"
                )

        max_tokens = policy_config["max_tokens"]
        temperature = policy_config["temperature"]

        if not isinstance(max_tokens, int) or max_tokens < 1:
            raise ValueError("request_policy.max_tokens must be a positive integer")
        if temperature is not None and not 0 <= temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"request_policy.temperature must be between 0 and {MAX_TEMPERATURE}"
            )

        prompt_file = policy_config["system_prompt_file"]
        system_prompt = self.load_system_prompt(prompt_file) if prompt_file else None

        return RequestPolicy(
            max_tokens=max_tokens,
            temperature=float(temperature) if temperature is not None else None,
            model=policy_config["model"] or None,
            system_prompt=system_prompt,
        )

    @staticmethod
    def load_system_prompt(file_path: str) -> str:
        """Read a system prompt file, relative paths resolve to the package."""
        if not os.path.isabs(file_path):
            file_path = os.path.join(PACKAGE_DIR, file_path)
        with open(file_path, encoding="utf-8") as f:
            return f.read()

    def get_chat_config(self) -> dict[str, Any]:
        """Get caller-side chat defaults from YAML."""
        return self._config.get("chat", {})

    def get_default_model(self) -> OpenAIModel:
        """Get the model used when the caller does not pick one."""
        model_id = (
            os.getenv("DEFAULT_MODEL")
            or self.get_chat_config().get("default_model")
            or FALLBACK_MODEL_ID.value
        )
        return get_model(model_id)

    def get_default_temperature(self) -> float:
        """Get the temperature used when the caller does not pick one."""
        value = os.getenv("DEFAULT_TEMPERATURE")
        if value is None:
            value = self.get_chat_config().get("default_temperature", 1.0)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(
                f"default_temperature must be a number, got '{value}'"
            ) from None

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration from YAML.

        Raises:
            ValueError: If the timeout is not positive.
        """
        http_config = self._config.get("http_client") or {}
        timeout = http_config.get("timeout")
        if timeout is not None and timeout <= 0:
            raise ValueError("http_client.timeout must be positive or null")
        return {**http_config, "timeout": timeout}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._config.get("logging", {})
