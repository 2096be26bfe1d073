"""Async client for Azure Language extractive summarization jobs."""
from __future__ import annotations
import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from completion_runner.common.config import Credentials
from completion_runner.common.errors import CompletionServiceError
from completion_runner.common.schema import JobStatus, SummaryPage
from completion_runner.service.http import send

LOGGER = logging.getLogger("completion_runner.service.language")

JOBS_PATH = "/language/analyze-text/jobs"


class AsyncLanguageClient:
    """Submits an analyze job, waits for it, then pages through its results."""

    def __init__(
        self,
        credentials: Credentials,
        api_version: str = "2023-04-01",
        poll_interval: float = 5.0,
        timeout: float = 120.0,
    ) -> None:
        self.credentials = credentials
        self.api_version = api_version
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None
        # terminal job bodies from polling; page one of the results
        self._finished: dict[str, dict[str, Any]] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.credentials.endpoint,
                headers={"Ocp-Apim-Subscription-Key": self.credentials.key},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncLanguageClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def begin_extractive_summary(
        self,
        documents: Sequence[str],
        language: str = "en",
        sentence_count: int = 3,
    ) -> str:
        """Start a summarization job and return its id.

        Documents are numbered "1", "2", ... in the order given.
        """
        payload: dict[str, Any] = {
            "displayName": "Extractive summarization",
            "analysisInput": {
                "documents": [
                    {"id": str(i), "language": language, "text": text}
                    for i, text in enumerate(documents, start=1)
                ]
            },
            "tasks": [
                {
                    "kind": "ExtractiveSummarization",
                    "taskName": "extractive-summary",
                    "parameters": {"sentenceCount": sentence_count},
                }
            ],
        }
        response = await send(
            self._get_client(),
            "POST",
            JOBS_PATH,
            params={"api-version": self.api_version},
            json=payload,
        )
        location = response.headers.get("operation-location")
        if not location:
            raise CompletionServiceError(
                "Job accepted without an operation-location header",
                status_code=response.status_code,
            )
        job_id = httpx.URL(location).path.rstrip("/").rsplit("/", 1)[-1]
        LOGGER.info("Started summarization job %s for %d document(s)", job_id, len(documents))
        return job_id

    async def _get_job(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        response = await send(self._get_client(), "GET", url, params=params)
        return response.json()

    async def _get_job_body(self, job_id: str) -> dict[str, Any]:
        return await self._get_job(f"{JOBS_PATH}/{job_id}", {"api-version": self.api_version})

    async def get_status(self, job_id: str) -> JobStatus:
        return JobStatus.model_validate(await self._get_job_body(job_id))

    async def wait_for_completion(self, job_id: str) -> JobStatus:
        """Poll until the job reaches a terminal status.

        Raises:
            CompletionServiceError: If the job failed or was cancelled.
        """
        body = await self._get_job_body(job_id)
        status = JobStatus.model_validate(body)
        while not status.is_terminal:
            LOGGER.debug("Job %s is %s; polling again in %ss", job_id, status.status, self.poll_interval)
            await asyncio.sleep(self.poll_interval)
            body = await self._get_job_body(job_id)
            status = JobStatus.model_validate(body)

        if status.status in ("failed", "cancelled"):
            first = status.errors[0] if status.errors else None
            raise CompletionServiceError(
                f"Summarization job {job_id} {status.status}"
                + (f": {first.message}" if first else ""),
                code=first.code if first else None,
            )
        self._finished[job_id] = body
        LOGGER.info("Job %s finished with status %s", job_id, status.status)
        return status

    async def iter_pages(self, job_id: str) -> AsyncIterator[SummaryPage]:
        """Yield result pages, following ``nextLink`` until it is absent.

        Page one is the body that ended ``wait_for_completion`` when there
        was one; otherwise the job is fetched.
        """
        body = self._finished.pop(job_id, None)
        if body is None:
            body = await self._get_job_body(job_id)
        page = SummaryPage.from_job_body(body)
        yield page
        while page.next_link:
            body = await self._get_job(page.next_link)
            page = SummaryPage.from_job_body(body)
            yield page
