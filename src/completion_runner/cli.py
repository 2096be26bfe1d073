"""Command line entrypoint."""
from __future__ import annotations
import argparse
import asyncio
import logging
from typing import Any, Sequence

from completion_runner.common.config import (
    DEFAULT_SETTINGS_PATH,
    LANGUAGE_ENDPOINT_VAR,
    LANGUAGE_KEY_VAR,
    load_credentials,
    load_settings,
)
from completion_runner.common.errors import CompletionRunnerError
from completion_runner.common.logging_setup import setup_logging
from completion_runner.common.templates import load_documents, load_prompt
from completion_runner.runner import run
from completion_runner.service.completions_client import AsyncCompletionsClient
from completion_runner.service.language_client import AsyncLanguageClient
from completion_runner.summarize import summarize

LOGGER = logging.getLogger("completion_runner.cli")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="completion-runner", description="Run one Azure completion request")
    ap.add_argument("--settings", default=DEFAULT_SETTINGS_PATH, help="Settings YAML path")
    ap.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override settings log_level",
    )
    sub = ap.add_subparsers(dest="command")

    complete = sub.add_parser("complete", help="Send one prompt and print every choice (default)")
    source = complete.add_mutually_exclusive_group()
    source.add_argument("--prompt", help="Prompt text")
    source.add_argument("--prompt-file", help="Prompt file path")
    complete.add_argument("--choices", type=int, help="Number of choices")
    complete.add_argument("--max-tokens", type=int, help="Token limit per choice")
    complete.add_argument("--user", help="End-user tag forwarded to the service")

    # bare `completion-runner` behaves like `completion-runner complete`
    ap.set_defaults(prompt=None, prompt_file=None, choices=None, max_tokens=None, user=None)

    summ = sub.add_parser("summarize", help="Extractive summary of one or more documents")
    summ.add_argument("--document-file", help="Documents separated by '---' lines")
    return ap


async def _complete(args: argparse.Namespace, settings: dict[str, Any]) -> None:
    credentials = load_credentials()
    if args.prompt is not None:
        prompt = args.prompt
    else:
        prompt = load_prompt(args.prompt_file or settings["prompt_file"])
    async with AsyncCompletionsClient(
        credentials,
        deployment=settings["deployment"],
        api_version=settings["api_version"],
        timeout=float(settings["timeout_seconds"]),
    ) as client:
        await run(
            client,
            prompt,
            choice_count=args.choices if args.choices is not None else int(settings["choice_count"]),
            max_tokens=args.max_tokens if args.max_tokens is not None else int(settings["max_tokens"]),
            user_tag=args.user if args.user is not None else str(settings["user_tag"]),
        )


async def _summarize(args: argparse.Namespace, settings: dict[str, Any]) -> None:
    credentials = load_credentials(LANGUAGE_KEY_VAR, LANGUAGE_ENDPOINT_VAR)
    lang_cfg = settings["language"]
    documents = load_documents(args.document_file or lang_cfg["document_file"])
    async with AsyncLanguageClient(
        credentials,
        api_version=lang_cfg["api_version"],
        poll_interval=float(lang_cfg["poll_interval_seconds"]),
        timeout=float(settings["timeout_seconds"]),
    ) as client:
        await summarize(client, documents)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.settings)
    except CompletionRunnerError as e:
        setup_logging()
        LOGGER.error("%s", e)
        return 1
    setup_logging(args.log_level or settings["log_level"])

    work = _summarize(args, settings) if args.command == "summarize" else _complete(args, settings)

    try:
        asyncio.run(work)
    except CompletionRunnerError as e:
        LOGGER.error("%s: %s", type(e).__name__, e)
        return 1
    return 0
