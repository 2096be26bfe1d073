from __future__ import annotations

import io
import json
from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest
from pytest_httpx import HTTPXMock

from completion_runner.common.config import Credentials
from completion_runner.common.errors import CompletionServiceError
from completion_runner.common.schema import JobStatus, SummaryPage
from completion_runner.service.language_client import AsyncLanguageClient
from completion_runner.summarize import summarize

LANG = "https://example.cognitiveservices.azure.com"
JOB_URL = f"{LANG}/language/analyze-text/jobs/job-1?api-version=2023-04-01"
SUBMIT_URL = f"{LANG}/language/analyze-text/jobs?api-version=2023-04-01"


def _job_body(status: str = "succeeded", items: list[dict[str, Any]] | None = None, next_link: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "jobId": "job-1",
        "status": status,
        "createdDateTime": "2023-05-01T10:00:00Z",
        "expirationDateTime": "2023-05-02T10:00:00Z",
        "lastUpdatedDateTime": "2023-05-01T10:00:05Z",
        "tasks": {"completed": 1, "failed": 0, "inProgress": 0, "total": 1, "items": items or []},
    }
    if next_link:
        body["nextLink"] = next_link
    return body


def _summary_item(documents: list[dict[str, Any]], errors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "kind": "ExtractiveSummarizationLROResults",
        "taskName": "extractive-summary",
        "status": "succeeded",
        "results": {"documents": documents, "errors": errors or [], "modelVersion": "latest"},
    }


MIXED_PAGE_ITEM = _summary_item(
    documents=[
        {"id": "2", "sentences": [{"text": "Key sentence one.", "rankScore": 1.0}, {"text": "Key two.", "rankScore": 0.5}], "warnings": []},
    ],
    errors=[
        {"id": "1", "error": {"code": "InvalidArgument", "message": "Document text is empty."}},
    ],
)


class _FakeLanguageClient:
    def __init__(self, pages: list[SummaryPage]) -> None:
        self.pages = pages
        self.submitted: list[str] = []

    async def begin_extractive_summary(self, documents: Sequence[str]) -> str:
        self.submitted = list(documents)
        return "job-1"

    async def wait_for_completion(self, job_id: str) -> JobStatus:
        return JobStatus.model_validate(_job_body())

    async def iter_pages(self, job_id: str) -> AsyncIterator[SummaryPage]:
        for page in self.pages:
            yield page


@pytest.mark.asyncio
async def test_document_error_is_isolated_within_page() -> None:
    client = _FakeLanguageClient([SummaryPage.from_job_body(_job_body(items=[MIXED_PAGE_ITEM]))])
    out = io.StringIO()

    failures = await summarize(client, ["", "some text"], out=out)

    text = out.getvalue()
    assert failures == 1
    assert "  Document error code: InvalidArgument." in text
    assert "  Message: Document text is empty." in text
    assert "  Extracted the following 2 sentence(s):" in text
    assert "  Sentence: Key sentence one." in text
    assert "  Sentence: Key two." in text
    # input order preserved: the failing document "1" comes before "2"
    assert text.index("Document error code") < text.index("Extracted the following")


@pytest.mark.asyncio
async def test_action_error_skips_its_documents_only() -> None:
    failed_item = {
        "kind": "ExtractiveSummarizationLROResults",
        "taskName": "extractive-summary",
        "lastUpdateDateTime": "2023-05-01T10:00:05Z",
        "status": "failed",
    }
    ok_item = _summary_item([{"id": "1", "sentences": [{"text": "Survivor."}]}])
    body = _job_body(status="partiallySucceeded", items=[failed_item, ok_item])
    body["errors"] = [
        {"code": "InternalServerError", "message": "Task failed.", "target": "#/tasks/items/0"},
    ]
    client = _FakeLanguageClient([SummaryPage.from_job_body(body)])
    out = io.StringIO()

    failures = await summarize(client, ["doc"], out=out)

    text = out.getvalue()
    assert failures == 1
    assert "  Action error code: InternalServerError." in text
    assert "  Message: Task failed." in text
    assert "  Sentence: Survivor." in text


@pytest.mark.asyncio
async def test_status_header_printed() -> None:
    client = _FakeLanguageClient([SummaryPage()])
    out = io.StringIO()

    await summarize(client, ["doc"], out=out)

    lines = out.getvalue().splitlines()
    assert lines[0] == "AnalyzeActions operation has completed"
    assert "Id           : job-1" in lines
    assert "Status       : succeeded" in lines


@pytest.mark.asyncio
async def test_language_client_polls_and_follows_next_link(
    httpx_mock: HTTPXMock, language_credentials: Credentials
) -> None:
    next_link = f"{LANG}/language/analyze-text/jobs/job-1?api-version=2023-04-01&top=1&skip=1"
    second_item = _summary_item([{"id": "3", "sentences": [{"text": "From page two."}]}])

    httpx_mock.add_response(
        url=SUBMIT_URL,
        method="POST",
        status_code=202,
        headers={"operation-location": JOB_URL},
    )
    httpx_mock.add_response(url=JOB_URL, method="GET", json=_job_body(status="running"))
    httpx_mock.add_response(url=JOB_URL, method="GET", json=_job_body(items=[MIXED_PAGE_ITEM], next_link=next_link))
    httpx_mock.add_response(url=next_link, method="GET", json=_job_body(items=[second_item]))

    out = io.StringIO()
    async with AsyncLanguageClient(language_credentials, poll_interval=0) as client:
        failures = await summarize(client, ["", "doc two", "doc three"], out=out)

    text = out.getvalue()
    assert failures == 1
    assert "  Sentence: Key sentence one." in text
    assert "  Sentence: From page two." in text

    submit = httpx_mock.get_requests(method="POST")[0]
    assert submit.headers["Ocp-Apim-Subscription-Key"] == "lang-key"
    body = json.loads(submit.content)
    assert [d["id"] for d in body["analysisInput"]["documents"]] == ["1", "2", "3"]
    assert body["tasks"][0]["kind"] == "ExtractiveSummarization"
    # page one comes from the final poll, not a second fetch of the job
    assert len(httpx_mock.get_requests(method="GET", url=JOB_URL)) == 2


@pytest.mark.asyncio
async def test_failed_job_raises(httpx_mock: HTTPXMock, language_credentials: Credentials) -> None:
    body = _job_body(status="failed")
    body["errors"] = [{"code": "InvalidRequest", "message": "Job failed."}]
    httpx_mock.add_response(url=JOB_URL, method="GET", json=body)

    async with AsyncLanguageClient(language_credentials, poll_interval=0) as client:
        with pytest.raises(CompletionServiceError) as exc_info:
            await client.wait_for_completion("job-1")

    assert exc_info.value.code == "InvalidRequest"


@pytest.mark.asyncio
async def test_missing_operation_location(httpx_mock: HTTPXMock, language_credentials: Credentials) -> None:
    httpx_mock.add_response(url=SUBMIT_URL, method="POST", status_code=202)

    async with AsyncLanguageClient(language_credentials) as client:
        with pytest.raises(CompletionServiceError):
            await client.begin_extractive_summary(["doc"])

def test_job_errors_attach_to_targeted_task() -> None:
    failed = {"kind": "ExtractiveSummarizationLROResults", "status": "failed"}
    ok_item = _summary_item([{"id": "1", "sentences": [{"text": "Kept."}]}])
    body = _job_body(status="partiallySucceeded", items=[ok_item, failed])
    body["errors"] = [
        {"code": "InvalidDocumentBatch", "message": "Job-wide note.", "target": "#/tasks"},
        {"code": "InvalidRequest", "message": "Task rejected", "target": "#/tasks/items/1"},
    ]

    page = SummaryPage.from_job_body(body)

    assert not page.actions[0].has_error
    assert page.actions[1].error is not None
    assert page.actions[1].error.code == "InvalidRequest"
    assert page.actions[1].error.message == "Task rejected"


@pytest.mark.asyncio
async def test_iter_pages_fetches_job_without_prior_wait(
    httpx_mock: HTTPXMock, language_credentials: Credentials
) -> None:
    httpx_mock.add_response(url=JOB_URL, method="GET", json=_job_body(items=[MIXED_PAGE_ITEM]))

    async with AsyncLanguageClient(language_credentials) as client:
        pages = [page async for page in client.iter_pages("job-1")]

    assert len(pages) == 1
    assert len(pages[0].actions[0].documents) == 2
