# dna_screener/tools/base.py

"""
Shared plumbing for the research tool adapters.

Adapters talk to plain HTTPS JSON APIs through a ``requests.Session``.
Blocking calls run in a worker thread under a hard timeout, so a hung
upstream surfaces as an in-band error result instead of stalling the
completion loop.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import requests

from config.settings import Settings
from dna_screener.models.schemas import ToolOutput
from dna_screener.utils.logger import get_logger

logger = get_logger("ToolAdapter")


class BaseToolAdapter:
    """
    Base class for research tool adapters.

    Public adapter operations never raise: they return a ToolOutput whose
    metadata carries ``error``/``message`` when nothing could be fetched.
    """

    display_name = "Tool"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.timeout = settings.tool_timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        })

    async def _run_blocking(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a blocking call in a thread, cancelled after the tool timeout."""
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs),
            timeout=self.timeout,
        )

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET a URL and decode the JSON body.

        Raises:
            requests.exceptions.HTTPError: On non-2xx responses.
            requests.exceptions.RequestException: On transport failures.
            asyncio.TimeoutError: When the tool timeout trips.
        """
        def fetch() -> Any:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        return await self._run_blocking(fetch)

    async def _guarded(self, operation: Awaitable[ToolOutput], **context: Any) -> ToolOutput:
        """
        Await an adapter operation, converting any failure into an error result.
        """
        try:
            return await operation
        except asyncio.TimeoutError:
            logger.warning(f"{self.display_name} request timed out", timeout=self.timeout, **context)
            return ToolOutput.failure(
                f"{self.display_name} request timed out after {self.timeout:g} seconds",
                **context,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.display_name} request failed: {e}", **context)
            return ToolOutput.failure(f"{self.display_name} request failed: {e}", **context)
        except Exception as e:
            logger.error(
                f"Unexpected {self.display_name} failure: {e.__class__.__name__}: {e}",
                exc_info=True,
                **context,
            )
            return ToolOutput.failure(f"{self.display_name} error: {e}", **context)
