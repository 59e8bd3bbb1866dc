#!/usr/bin/env python3
"""
Test the command line entry point with a stubbed stream client.
"""

import pytest
import yaml

import openai_stream.main as main_module
from openai_stream.llm.exceptions import OpenAIError


class FakeStreamClient:
    """Stands in for OpenAIStreamClient; records the call it receives."""

    calls: list = []
    chunks: list[bytes] = [b"Overall ", b"band: 7"]
    error: Exception | None = None

    def __init__(self, provider, policy):
        self.provider = provider
        self.policy = policy

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def stream(self, model, system_prompt, temperature, key, messages):
        FakeStreamClient.calls.append((model, system_prompt, temperature, key, messages))
        if FakeStreamClient.error is not None:
            raise FakeStreamClient.error

        async def deltas():
            for chunk in FakeStreamClient.chunks:
                yield chunk
        return deltas()


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    FakeStreamClient.calls = []
    FakeStreamClient.error = None
    monkeypatch.setattr(main_module, "OpenAIStreamClient", FakeStreamClient)
    for key in ("DEFAULT_MODEL", "DEFAULT_TEMPERATURE", "OPENAI_API_TYPE"):
        monkeypatch.delenv(key, raising=False)
    return FakeStreamClient


@pytest.mark.asyncio
async def test_streams_to_stdout(capsysbinary):
    code = await main_module.main(["My", "essay", "text"])

    assert code == 0
    assert capsysbinary.readouterr().out == b"Overall band: 7\n"

    model, system_prompt, temperature, key, messages = FakeStreamClient.calls[0]
    assert model.id == "gpt-3.5-turbo"
    assert temperature == 1.0
    assert key is None
    assert messages[0].role == "user"
    assert messages[0].content == "My essay text"


@pytest.mark.asyncio
async def test_model_and_temperature_flags():
    await main_module.main(["--model", "gpt-4", "--temperature", "0.2", "essay"])

    model, _, temperature, _, _ = FakeStreamClient.calls[0]
    assert model.id == "gpt-4"
    assert temperature == 0.2


@pytest.mark.asyncio
async def test_upstream_error_exit_status(capsysbinary):
    FakeStreamClient.error = OpenAIError(
        "Rate limit reached", "requests", None, "rate_limit_exceeded"
    )

    code = await main_module.main(["essay"])

    assert code == 1
    assert b"[upstream_rejected] Rate limit reached" in capsysbinary.readouterr().err


@pytest.mark.asyncio
async def test_empty_message_rejected(monkeypatch):
    monkeypatch.setattr("sys.stdin", _Stdin("   \n"))

    assert await main_module.main([]) == 2
    assert FakeStreamClient.calls == []


@pytest.mark.asyncio
async def test_bad_config_reported_without_traceback(tmp_path, capsysbinary):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump({"openai": {"api_type": "bogus"}}))

    code = await main_module.main(["--config", str(config_file), "essay"])

    assert code == 1
    err = capsysbinary.readouterr().err
    assert b"[parameter_error] openai.api_type must be one of" in err
    assert FakeStreamClient.calls == []


class _Stdin:
    def __init__(self, text):
        self.text = text

    def read(self):
        return self.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
