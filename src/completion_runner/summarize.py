"""Extractive summarization printer.

Walks every page of a finished job. A failed action or document prints its
error code and message and is skipped; its siblings are still printed.
"""
from __future__ import annotations
import logging
import sys
from collections.abc import AsyncIterator, Sequence
from typing import Protocol, TextIO

from completion_runner.common.schema import JobStatus, SummaryActionResult, SummaryPage

LOGGER = logging.getLogger("completion_runner.summarize")


class LanguageClient(Protocol):
    async def begin_extractive_summary(self, documents: Sequence[str]) -> str:
        ...

    async def wait_for_completion(self, job_id: str) -> JobStatus:
        ...

    def iter_pages(self, job_id: str) -> AsyncIterator[SummaryPage]:
        ...


def print_status(status: JobStatus, out: TextIO) -> None:
    print("AnalyzeActions operation has completed", file=out)
    print(file=out)
    print(f"Created On   : {status.created_on}", file=out)
    print(f"Expires On   : {status.expires_on}", file=out)
    print(f"Id           : {status.job_id}", file=out)
    print(f"Status       : {status.status}", file=out)
    print(file=out)


def print_action(action: SummaryActionResult, out: TextIO) -> int:
    """Print one action's documents; returns the number of items in error."""
    if action.has_error:
        print("  Error!", file=out)
        print(f"  Action error code: {action.error.code}.", file=out)
        print(f"  Message: {action.error.message}", file=out)
        return 1

    failures = 0
    for doc in action.documents:
        if doc.has_error:
            print("  Error!", file=out)
            print(f"  Document error code: {doc.error.code}.", file=out)
            print(f"  Message: {doc.error.message}", file=out)
            failures += 1
            continue

        print(f"  Extracted the following {len(doc.sentences)} sentence(s):", file=out)
        print(file=out)
        for sentence in doc.sentences:
            print(f"  Sentence: {sentence.text}", file=out)
            print(file=out)
    return failures


async def summarize(
    client: LanguageClient,
    documents: Sequence[str],
    out: TextIO | None = None,
) -> int:
    """
    Run one extractive summarization job and print its results.

    Args:
        client: Language service client.
        documents: Input documents.
        out: Destination stream; defaults to stdout.

    Returns:
        Number of actions and documents that reported an error.
    """
    stream = out or sys.stdout
    job_id = await client.begin_extractive_summary(documents)
    status = await client.wait_for_completion(job_id)
    print_status(status, stream)

    failures = 0
    async for page in client.iter_pages(job_id):
        for action in page.actions:
            failures += print_action(action, stream)

    if failures:
        LOGGER.warning("%d item(s) reported errors", failures)
    return failures
