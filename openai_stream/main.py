"""
Command line entry point for streaming assessments.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from openai_stream.chat.models import Message, get_model
from openai_stream.config import Configuration
from openai_stream.llm.client import OpenAIStreamClient
from openai_stream.llm.exceptions import LLMError
from openai_stream.logging_utils import (
    LLMErrorHandler,
    configure_logging,
    operation_context,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="openai-stream",
        description="Stream an assessment of the given text to stdout.",
    )
    parser.add_argument(
        "message",
        nargs="*",
        help="user message; read from stdin when omitted",
    )
    parser.add_argument("--config", help="path to a config.yaml")
    parser.add_argument("--model", help="model id (default from config)")
    parser.add_argument("--temperature", type=float)
    parser.add_argument("--system-prompt", default="")
    return parser.parse_args(argv)


def report_error(error: Exception) -> None:
    category = LLMErrorHandler.classify_error(error)
    print(f"\n[{category}] {error}", file=sys.stderr)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point - one request, streamed to stdout."""
    args = parse_args(argv)
    try:
        config = Configuration(args.config)
        configure_logging(config.get_logging_config().get("level", "INFO"))
        provider = config.get_provider_config()
        policy = config.get_request_policy()
        model = get_model(args.model) if args.model else config.get_default_model()
        temperature = (
            args.temperature if args.temperature is not None
            else config.get_default_temperature()
        )
    except ValueError as e:
        report_error(e)
        return 1

    text = " ".join(args.message) if args.message else sys.stdin.read()
    if not text.strip():
        print("Nothing to send: empty message", file=sys.stderr)
        return 2

    messages = [Message(role="user", content=text)]

    async with OpenAIStreamClient(provider, policy) as client:
        try:
            async with operation_context(
                "assess_text", context={"model": model.id}
            ):
                deltas = await client.stream(
                    model, args.system_prompt, temperature, None, messages
                )
                async for delta in deltas:
                    sys.stdout.buffer.write(delta)
                    sys.stdout.buffer.flush()
        except LLMError as e:
            report_error(e)
            return 1

    sys.stdout.buffer.write(b"\n")
    return 0


def run() -> None:
    """Console script wrapper around ``main``."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
