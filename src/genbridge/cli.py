"""Command line interface for talking to an OpenAI-compatible server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

from .config import OpenAIConfig
from .core import (
    AdapterError,
    GenerateContentConfig,
    GenerateContentParameters,
)
from .core.adapters import OpenAICompatibleContentGenerator, estimate_tokens

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genbridge",
        description="Send content generation requests to an OpenAI-compatible server",
    )
    parser.add_argument("--endpoint", help="Base URL of the server (default: $GENBRIDGE_ENDPOINT)")
    parser.add_argument("--model", help="Model identifier (default: $GENBRIDGE_MODEL)")
    parser.add_argument("--api-key", help="Bearer credential (default: $GENBRIDGE_API_KEY)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="generate a response for a prompt")
    generate_parser.add_argument("prompt", help="User prompt")
    generate_parser.add_argument("--system", help="System instruction")
    generate_parser.add_argument("--temperature", type=float)
    generate_parser.add_argument("--max-tokens", type=int, dest="max_tokens")
    generate_parser.add_argument("--top-p", type=float, dest="top_p")
    generate_parser.add_argument(
        "--stream",
        action="store_true",
        help="Print fragments as they arrive instead of waiting for the full response",
    )

    count_parser = subparsers.add_parser("count-tokens", help="estimate the token count of a prompt")
    count_parser.add_argument("prompt", help="Text to estimate")

    return parser


def _resolve_config(args: argparse.Namespace) -> OpenAIConfig:
    return OpenAIConfig.from_env(
        endpoint=args.endpoint,
        model=args.model,
        api_key=args.api_key,
    )


def _build_request(args: argparse.Namespace) -> GenerateContentParameters:
    config = GenerateContentConfig(
        temperature=args.temperature,
        max_output_tokens=args.max_tokens,
        top_p=args.top_p,
        system_instruction=args.system,
    )
    return GenerateContentParameters(contents=args.prompt, config=config)


async def _handle_generate(args: argparse.Namespace) -> int:
    generator = OpenAICompatibleContentGenerator(_resolve_config(args))
    request = _build_request(args)

    if not args.stream:
        response = await generator.generate_content(request)
        sys.stdout.write(response.text)
        sys.stdout.write("\n")
        return 0

    async with generator.generate_content_stream(request) as stream:
        async for fragment in stream:
            sys.stdout.write(fragment.text)
            sys.stdout.flush()
    sys.stdout.write("\n")
    return 0


async def _handle_count_tokens(args: argparse.Namespace) -> int:
    # Estimation is local; no server configuration is needed.
    print(estimate_tokens(args.prompt))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "generate": _handle_generate,
        "count-tokens": _handle_count_tokens,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error("no command provided")
        return 2

    try:
        return asyncio.run(handler(args))
    except ValueError as exc:
        parser.error(str(exc))
        return 2
    except AdapterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
