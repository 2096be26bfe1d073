"""Async client for an Azure OpenAI completions deployment."""
from __future__ import annotations
import logging
import time

import httpx

from completion_runner.common.config import Credentials
from completion_runner.common.schema import CompletionRequest, CompletionsResponse
from completion_runner.service.http import send

LOGGER = logging.getLogger("completion_runner.service.completions")


class AsyncCompletionsClient:
    """Asynchronous client for the completions endpoint.

    Example:
        async with AsyncCompletionsClient(credentials, deployment="GPT-35-turbo") as client:
            response = await client.get_completions(request)
    """

    def __init__(
        self,
        credentials: Credentials,
        deployment: str,
        api_version: str = "2023-05-15",
        timeout: float = 120.0,
    ) -> None:
        self.credentials = credentials
        self.deployment = deployment
        self.api_version = api_version
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def completions_path(self) -> str:
        return f"/openai/deployments/{self.deployment}/completions"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.credentials.endpoint,
                headers={"api-key": self.credentials.key},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncCompletionsClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def get_completions(self, request: CompletionRequest) -> CompletionsResponse:
        """Submit one completion request and wait for its response.

        Raises:
            AuthenticationError: If the key is rejected.
            RateLimitError: If quota is exhausted.
            ServerError: If the service returns 5xx.
            ServiceUnavailableError: If the service cannot be reached.
            CompletionServiceError: For other error responses.
        """
        client = self._get_client()
        LOGGER.info(
            "Requesting %d choice(s), max_tokens=%d from deployment %s",
            request.choice_count,
            request.max_tokens,
            self.deployment,
        )
        start = time.time()
        response = await send(
            client,
            "POST",
            self.completions_path,
            params={"api-version": self.api_version},
            json=request.to_payload(),
        )
        latency_ms = int((time.time() - start) * 1000)

        result = CompletionsResponse.model_validate(response.json())
        LOGGER.info("Received %d choice(s) in %sms", len(result.choices), latency_ms)
        return result
