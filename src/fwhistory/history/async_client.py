"""
Async HTTP Client for fwhistory

This module provides asynchronous HTTP operations using aiohttp, with proper
session management, an explicit request timeout and "absent means None" error
handling for the firmware history sources.
"""

import asyncio
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from fwhistory.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    FOTA_VERSION_URL_TEMPLATE,
    HISTORY_URL_TEMPLATE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)
from fwhistory.log_utils import logger
from fwhistory.utils import get_user_agent


def build_source_url(template: str, model: str, region: str) -> str:
    """
    Fill a `{model}`/`{region}` URL template with URL-quoted values.

    Parameters:
        template (str): URL template containing `{model}` and/or `{region}`.
        model (str): Device model, e.g. "SM-G998B".
        region (str): Region/CSC code, e.g. "EUX".

    Returns:
        str: The formatted URL.
    """
    return template.format(
        model=quote(model.strip(), safe=""),
        region=quote(region.strip(), safe=""),
    )


class AsyncHistoryClient:
    """
    Asynchronous client for the firmware history sources.

    Every fetch returns the response text, or None when the source has nothing to
    offer (non-2xx status, empty body, network error or timeout). A missing history
    is a normal outcome, so nothing here raises for it.

    Example:
        async with AsyncHistoryClient() as client:
            xml = await client.fetch_secondary_xml("SM-G998B", "EUX")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        history_url_template: str = HISTORY_URL_TEMPLATE,
        fota_url_template: str = FOTA_VERSION_URL_TEMPLATE,
        connector_limit: int = 10,
    ) -> None:
        """
        Initialize the history client.

        Parameters:
            timeout (float): Total request timeout in seconds.
            history_url_template (str): URL template of the primary history page.
            fota_url_template (str): URL template of the FOTA version.xml document.
            connector_limit (int): Maximum total connections in the pool.
        """
        self.timeout = ClientTimeout(total=timeout)
        self.history_url_template = history_url_template
        self.fota_url_template = fota_url_template
        self.connector_limit = connector_limit
        self._session: Optional[ClientSession] = None
        self._closed: bool = False

    async def __aenter__(self) -> "AsyncHistoryClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            connector = TCPConnector(
                limit=self.connector_limit,
                enable_cleanup_closed=True,
            )
            self._session = ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
            self._closed = False
        return self._session

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "text/html,application/xhtml+xml,application/xml,*/*",
            "User-Agent": get_user_agent(),
        }

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._closed = True

    async def get_text(self, url: str) -> Optional[str]:
        """
        GET a URL and return its body text.

        Parameters:
            url (str): The URL to fetch.

        Returns:
            Optional[str]: The response body on a 2xx status with non-blank content,
                otherwise None.
        """
        session = await self._ensure_session()

        try:
            async with session.get(url) as response:
                if not HTTP_STATUS_OK_MIN <= response.status <= HTTP_STATUS_OK_MAX:
                    logger.debug(f"No content at {url}: HTTP {response.status}")
                    return None
                body = await response.text()
        except asyncio.TimeoutError:
            logger.warning(f"Timed out fetching {url}")
            return None
        except aiohttp.ClientError as e:
            logger.warning(f"Network error fetching {url}: {e}")
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Undecodable response body from {url}: {e}")
            return None

        if not body or not body.strip():
            logger.debug(f"Empty response body from {url}")
            return None
        return body

    async def fetch_primary(self, model: str, region: str) -> Optional[str]:
        """
        Fetch the third-party firmware history page for a model and region.

        Returns:
            Optional[str]: The page text, or None when the page is unavailable.
        """
        url = build_source_url(self.history_url_template, model, region)
        logger.debug(f"Fetching firmware history page: {url}")
        return await self.get_text(url)

    async def fetch_secondary_xml(self, model: str, region: str) -> Optional[str]:
        """
        Fetch the vendor FOTA version.xml for a model and region.

        Returns:
            Optional[str]: The XML text, or None when the document is unavailable.
        """
        url = build_source_url(self.fota_url_template, model, region)
        logger.debug(f"Fetching FOTA version document: {url}")
        return await self.get_text(url)
