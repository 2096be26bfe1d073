"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

@dataclass(frozen=True)
class CompletionRequest:
    """One completion request; built fresh per invocation."""
    prompt: str
    choice_count: int
    max_tokens: int
    user_tag: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "prompt": [self.prompt],
            "n": self.choice_count,
            "max_tokens": self.max_tokens,
            "user": self.user_tag,
        }


class Choice(BaseModel):
    """One candidate completion."""

    model_config = ConfigDict(extra="ignore")

    text: str
    index: int | None = None
    finish_reason: str | None = None


class CompletionsResponse(BaseModel):
    """Body of a successful completions call."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    model: str | None = None
    choices: list[Choice] = Field(default_factory=list)
    usage: dict[str, Any] = Field(default_factory=dict)


class ServiceErrorDetail(BaseModel):
    """Error code and message reported by the service."""

    model_config = ConfigDict(extra="ignore")

    code: str = "Unknown"
    message: str = ""


class SummarySentence(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    rank_score: float | None = Field(default=None, alias="rankScore")


class DocumentSummary(BaseModel):
    """Summary of a single input document, or the error it produced."""

    model_config = ConfigDict(extra="ignore")

    id: str
    sentences: list[SummarySentence] = Field(default_factory=list)
    error: ServiceErrorDetail | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None


class SummaryActionResult(BaseModel):
    """Results of one summarization action within a page."""

    error: ServiceErrorDetail | None = None
    documents: list[DocumentSummary] = Field(default_factory=list)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_task_item(
        cls, item: dict[str, Any], job_error: dict[str, Any] | None = None
    ) -> "SummaryActionResult":
        """Build from one entry of a job's ``tasks.items`` list.

        A failed task carries no error of its own; the job's ``errors``
        entry targeting it is passed in as ``job_error``.

        Successful documents and per-document errors arrive in separate
        lists; they are merged back into input order by document id.
        """
        if item.get("status") == "failed":
            error = job_error or item.get("error") or {}
            return cls(error=ServiceErrorDetail.model_validate(error))

        results = item.get("results") or {}
        docs = [DocumentSummary.model_validate(d) for d in results.get("documents", [])]
        for failed in results.get("errors", []):
            docs.append(
                DocumentSummary(
                    id=str(failed.get("id", "")),
                    error=ServiceErrorDetail.model_validate(failed.get("error") or {}),
                )
            )
        docs.sort(key=_document_order)
        return cls(documents=docs)


def _document_order(doc: DocumentSummary) -> tuple[int, str]:
    # ids are assigned as "1", "2", ... on submit
    return (int(doc.id), doc.id) if doc.id.isdigit() else (0, doc.id)


_TASK_TARGET = re.compile(r"#/tasks/items/(\d+)")


class SummaryPage(BaseModel):
    """One page of summarization job results."""

    actions: list[SummaryActionResult] = Field(default_factory=list)
    next_link: str | None = None

    @classmethod
    def from_job_body(cls, body: dict[str, Any]) -> "SummaryPage":
        items = (body.get("tasks") or {}).get("items") or []
        by_index: dict[int, dict[str, Any]] = {}
        for error in body.get("errors") or []:
            match = _TASK_TARGET.fullmatch(str(error.get("target", "")))
            if match:
                by_index.setdefault(int(match.group(1)), error)
        return cls(
            actions=[
                SummaryActionResult.from_task_item(item, by_index.get(i))
                for i, item in enumerate(items)
            ],
            next_link=body.get("nextLink"),
        )


class JobStatus(BaseModel):
    """State of a long-running analyze job."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: str
    created_on: datetime | None = Field(default=None, alias="createdDateTime")
    expires_on: datetime | None = Field(default=None, alias="expirationDateTime")
    errors: list[ServiceErrorDetail] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in {"succeeded", "partiallySucceeded", "failed", "cancelled"}
