"""HTTP client for the job runner history endpoint."""

import logging
from typing import Any, Optional

import httpx

from ..config import BackendConfig
from ..exceptions import HistoryFetchError

logger = logging.getLogger(__name__)


class JobRunnerClient:
    """Async HTTP client for the job runner backend.

    Wraps an ``httpx.AsyncClient`` and exposes the history endpoint as a
    single coroutine. Errors are raised as ``HistoryFetchError``; nothing is
    retried here.
    """

    def __init__(
        self,
        config: Optional[BackendConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Backend configuration (defaults to BackendConfig())
            http_client: Optional pre-built client (for testing/dependency injection)
        """
        self.config = config or BackendConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
        )

    async def __aenter__(self) -> "JobRunnerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def get_job_history(
        self,
        limit: int,
        offset: int,
        only_mine: bool,
        last_updated: int,
    ) -> Any:
        """Fetch one raw history page. Returns the decoded JSON body."""
        params = {
            "limit": limit,
            "offset": offset,
            "only_mine": "true" if only_mine else "false",
            "last_updated": last_updated,
        }
        path = self.config.history_path
        logger.debug(f"GET {path} params={params}")

        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
            return response.json()  # Not async in httpx
        except httpx.HTTPStatusError as e:
            logger.error(
                f"History request failed: HTTP {e.response.status_code} for {path}"
            )
            raise HistoryFetchError(
                f"History request failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Could not reach job runner at {path}: {e}")
            raise HistoryFetchError(f"Could not reach job runner: {e}") from e
        except ValueError as e:
            logger.error(f"History response from {path} is not valid JSON: {e}")
            raise HistoryFetchError(f"Invalid history response: {e}") from e
