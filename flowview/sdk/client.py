"""Client for the orchestration backend's pattern API.

Covers the calls a pattern view needs: the catalogue, execute, and the
human-input endpoints. The catalogue is cached per client since it is
read-only configuration.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from flowview.errors import (
    HumanInputSubmissionError,
    PatternClientError,
    PatternNotFoundError,
)
from flowview.models.execution import ExecutionRequest, ExecutionResult
from flowview.models.pattern import PatternInfo

logger = logging.getLogger(__name__)


class PatternClient:
    """Synchronous client for the pattern API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080/api",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the pattern API (including the /api prefix)
            timeout: HTTP request timeout in seconds
            transport: optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._cache: dict[str, PatternInfo] = {}  # key is pattern id

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with self._client() as client:
                response = client.request(method, url, json=json)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PatternNotFoundError(f"Not found: {path}") from e
            raise PatternClientError(
                f"{method} {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise PatternClientError(
                f"Failed to connect to server at {self.base_url}: {e}"
            ) from e

    def list_patterns(self) -> list[PatternInfo]:
        """Fetch the whole catalogue (and cache every entry)."""
        data = self._request("GET", "/patterns").json()
        patterns = [PatternInfo.model_validate(item) for item in data]
        for pattern in patterns:
            self._cache[pattern.id] = pattern
        return patterns

    def get_pattern(self, pattern_id: str) -> PatternInfo:
        """Fetch one catalogue entry.

        Raises:
            PatternNotFoundError: the backend does not know the pattern
        """
        if pattern_id in self._cache:
            return self._cache[pattern_id]
        data = self._request("GET", f"/patterns/{pattern_id}").json()
        pattern = PatternInfo.model_validate(data)
        self._cache[pattern_id] = pattern
        return pattern

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Run a pattern synchronously and return its result."""
        logger.info("executing pattern %s", request.pattern_id)
        response = self._request(
            "POST",
            f"/patterns/{request.pattern_id}/execute",
            json=request.model_dump(by_alias=True, exclude_none=True),
        )
        return ExecutionResult.model_validate(response.json())

    def submit_human_input(self, request_id: str, text: str) -> None:
        """Deliver an answer for a pending human-input request.

        Raises:
            HumanInputSubmissionError: the backend rejected the answer or was unreachable
        """
        try:
            self._request("POST", f"/human-input/{request_id}", json={"input": text})
        except PatternClientError as e:
            raise HumanInputSubmissionError(
                f"Failed to submit human input for {request_id}: {e}"
            ) from e

    def pending_human_inputs(self) -> dict[str, str]:
        """Prompts the backend is still waiting on, keyed by request id."""
        data = self._request("GET", "/human-input/pending").json()
        return {str(key): str(value) for key, value in data.items()}

    def clear_cache(self) -> None:
        """Clear the pattern cache."""
        self._cache.clear()
