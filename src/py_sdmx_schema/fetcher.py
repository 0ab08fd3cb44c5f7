"""
Fetcher module for resolving SDMX-ML documents from URLs or inline XML.

This module provides a Fetcher class that handles:
- Detecting whether an input is a URL or raw XML content.
- Normalizing SDMX REST URLs so structure queries return referenced artefacts.
- Resiliently retrying failed requests with exponential backoff.

Nothing is cached; every call goes to the network.
"""

import logging
import re
from typing import Optional

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import AppSettings
from .exceptions import SdmxFetchError

# Configure a logger for this module
logger = logging.getLogger(__name__)

_PROTOCOL_RE = re.compile(r"^(https?|ftp)://")
_DOMAIN_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9\-]*\.[a-zA-Z0-9\-\.]+(/.*)?$")
_REFERENCES_RE = re.compile(r"[?&]references=")


def is_url(text: str) -> bool:
    """
    Detects whether a string is a URL rather than XML content.

    Handles explicit protocols (http, https, ftp), 'www.' prefixes, and bare
    domain-like strings such as 'example.org/rest/dataflow'.
    """
    candidate = text.strip().lower()
    if not candidate or "<" in text:
        return False
    if _PROTOCOL_RE.match(candidate):
        return True
    if candidate.startswith("www."):
        return True
    return bool(_DOMAIN_RE.match(candidate))


def normalize_sdmx_url(url: str) -> str:
    """
    Adds a protocol when missing and requests all referenced artefacts.

    Example: "stats.example.org/rest/dataflow/SPC/DF_BP50"
          -> "https://stats.example.org/rest/dataflow/SPC/DF_BP50?references=all"

    An explicit 'references=' parameter already on the URL is left untouched.
    """
    if not is_url(url):
        raise ValueError(f"Input must be a valid URL: {url!r}")

    normalized = url.strip()
    if not _PROTOCOL_RE.match(normalized.lower()):
        scheme = "ftp" if normalized.lower().startswith("ftp") else "https"
        normalized = f"{scheme}://{normalized}"

    if _REFERENCES_RE.search(normalized.lower()):
        return normalized

    separator = "&" if "?" in normalized else "?"
    return f"{normalized}{separator}references=all"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


class Fetcher:
    """
    Resolves SDMX-ML text from either a URL or inline XML.
    """

    def __init__(self, settings: AppSettings, client: Optional[httpx.Client] = None):
        """
        Initializes the Fetcher with application settings.

        Args:
            settings: An instance of AppSettings containing configuration.
            client: Optional pre-configured httpx client, mainly for tests.
        """
        self.settings = settings
        self.client = client or httpx.Client(
            headers={"User-Agent": settings.http.user_agent},
            follow_redirects=True,
            timeout=settings.http.timeout,
        )

    def _retrying(self) -> Retrying:
        http = self.settings.http
        return Retrying(
            wait=wait_exponential(multiplier=1, min=http.backoff_min, max=http.backoff_max),
            stop=stop_after_attempt(http.max_attempts),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _download(self, url: str) -> str:
        logger.info(f"Downloading SDMX document from {url}")
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error while downloading {url}: {e}")
            raise
        except httpx.TransportError as e:
            logger.error(f"Transport error while downloading {url}: {e}")
            raise
        return response.text

    def fetch_sdmx_xml(self, source: str) -> str:
        """
        Returns XML text for `source`, downloading it first if it is a URL.

        Raises:
            SdmxFetchError: If the response body is empty, or if `source` is
                neither a URL nor something that looks like XML.
            httpx.HTTPStatusError: If the server keeps answering with an error.
        """
        if not source or not source.strip():
            raise SdmxFetchError("Input cannot be empty.")

        if not is_url(source):
            if "<" not in source:
                raise SdmxFetchError("Input doesn't appear to be valid XML or a URL.")
            return source

        url = normalize_sdmx_url(source)
        body = self._retrying()(self._download, url)
        if not body.strip():
            raise SdmxFetchError(f"Empty response body from {url}")
        logger.info(f"Successfully downloaded {len(body)} characters from {url}")
        return body

    def close(self) -> None:
        self.client.close()
