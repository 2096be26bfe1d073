"""Request runner: one completion request, every choice printed in order."""
from __future__ import annotations
import logging
import sys
from collections.abc import Iterator
from typing import Protocol, TextIO

from completion_runner.common.schema import Choice, CompletionRequest, CompletionsResponse

LOGGER = logging.getLogger("completion_runner.runner")


class CompletionsClient(Protocol):
    async def get_completions(self, request: CompletionRequest) -> CompletionsResponse:
        ...


def iter_choices(response: CompletionsResponse) -> Iterator[Choice]:
    """Yield choices in the order the service returned them."""
    yield from response.choices


async def run(
    client: CompletionsClient,
    prompt_text: str,
    choice_count: int,
    max_tokens: int,
    user_tag: str,
    out: TextIO | None = None,
) -> list[Choice]:
    """
    Send one completion request and print each returned choice.

    Errors from the client propagate unchanged.

    Args:
        client: Anything with an async ``get_completions``.
        prompt_text: Prompt to submit.
        choice_count: Number of choices to ask for.
        max_tokens: Token limit per choice.
        user_tag: End-user identifier forwarded to the service.
        out: Destination stream; defaults to stdout.

    Returns:
        The printed choices, in print order.
    """
    stream = out or sys.stdout
    request = CompletionRequest(
        prompt=prompt_text,
        choice_count=choice_count,
        max_tokens=max_tokens,
        user_tag=user_tag,
    )
    response = await client.get_completions(request)

    printed: list[Choice] = []
    for choice in iter_choices(response):
        print(choice.text, file=stream)
        printed.append(choice)

    if len(printed) > choice_count:
        LOGGER.warning("Service returned %d choices for n=%d", len(printed), choice_count)
    return printed
