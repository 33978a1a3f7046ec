from __future__ import annotations

"""
Directory Listing Client.

Fetches auto-generated HTML index pages from the remote listing server and
turns their anchors into typed DirectoryEntry records. The client never
raises: network, status and parse failures are logged and degrade to an
empty listing so a single broken node cannot abort a crawl.
"""

import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import unquote, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from pyqcrawler.domain.paper_models import DirectoryEntry
from pyqcrawler.infra.network.common import DEFAULT_TIMEOUT, create_session

logger = logging.getLogger(__name__)

# Anchor texts emitted by IIS and Apache for the "go up" link
PARENT_DIRECTORY_MARKERS = ("[to parent directory]", "parent directory")

_DOUBLE_SLASH_RX = re.compile(r"([^:])/{2,}")
_WHITESPACE_RX = re.compile(r"\s+")

# -----------------------------------------------------------------------------
# URL REWRITING
# -----------------------------------------------------------------------------

def _absolutize(url: str, base_url: str) -> str:
    """Prefix non-absolute paths with the base URL and collapse doubled slashes."""
    if not url.startswith("http"):
        url = base_url.rstrip("/") + "/" + url.lstrip("/")
    return _DOUBLE_SLASH_RX.sub(r"\1/", url)


def build_listing_url(url: str, base_url: str) -> str:
    """
    Apply the listing rewrites: base prefix, separator collapse, '&' encoding.

    Args:
        url: Absolute URL or path relative to the listing root.
        base_url: Root URL of the listing server.

    Returns:
        str: Request-ready URL.
    """
    return _absolutize(url, base_url).replace("&", "%26")


def candidate_urls(url: str, base_url: str) -> List[str]:
    """
    List the encodings tried for a listing, in order, without duplicates.

    The server is inconsistent about which form it accepts, so the encoded
    form is followed by the un-encoded original and then a fully decoded form.

    Args:
        url: Absolute URL or path relative to the listing root.
        base_url: Root URL of the listing server.

    Returns:
        List[str]: Distinct candidate URLs.
    """
    original = _absolutize(url, base_url)
    out: List[str] = []
    for candidate in (build_listing_url(url, base_url), original, unquote(original)):
        if candidate not in out:
            out.append(candidate)
    return out


def relative_path(url: str, base_url: str) -> str:
    """
    Compute the decoded path of a resource relative to the listing root.

    Args:
        url: Absolute resource URL.
        base_url: Root URL of the listing server.

    Returns:
        str: Decoded relative path without a leading slash.
    """
    path = unquote(urlparse(url).path)
    base_path = unquote(urlparse(base_url).path)
    if base_path and base_path in path:
        path = path[path.index(base_path) + len(base_path):]
    return path.lstrip("/")

# -----------------------------------------------------------------------------
# HTML PARSING
# -----------------------------------------------------------------------------

def parse_directory_listing(html: str, current_url: str) -> List[DirectoryEntry]:
    """
    Parse an index page into directory and PDF file entries.

    Anchors whose href ends in '/' become directories, anchors ending in
    '.pdf' become files, every other anchor is ignored. The parent link and
    links pointing back at the current listing (or above it) are skipped.

    Args:
        html: Raw response body.
        current_url: URL the body was fetched from, used to resolve hrefs.

    Returns:
        List[DirectoryEntry]: Entries in document order.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    current_path = unquote(urlparse(current_url).path).rstrip("/") + "/"
    entries: List[DirectoryEntry] = []

    for anchor in soup.find_all("a", href=True):
        href = str(anchor.get("href", "")).strip()
        text = anchor.get_text(" ", strip=True)
        if not href or text.lower() in PARENT_DIRECTORY_MARKERS:
            continue

        if href.endswith("/"):
            is_directory = True
        elif href.lower().endswith(".pdf"):
            is_directory = False
        else:
            continue

        path = urljoin(current_url, href)
        if is_directory and current_path.startswith(unquote(urlparse(path).path).rstrip("/") + "/"):
            continue

        name = _clean_name(text) or _clean_name(unquote(href.rstrip("/").rsplit("/", 1)[-1]))
        entries.append(DirectoryEntry(name=name, is_directory=is_directory, path=path))

    return entries


def _clean_name(text: str) -> str:
    return _WHITESPACE_RX.sub(" ", text.strip().rstrip("/")).strip()

# -----------------------------------------------------------------------------
# CLIENT
# -----------------------------------------------------------------------------

class ListingClient:
    """
    Fetches and parses remote directory listings.

    Owns a pooled session with bounded transient retries. The encoding
    fallback performed by fetch() is independent of those retries.
    """

    def __init__(
            self,
            base_url: str,
            *,
            session: Optional[requests.Session] = None,
            timeout: float = DEFAULT_TIMEOUT,
            max_retries: int = 2,
            backoff_factor: float = 0.5,
            pool_size: int = 4,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._session = session or create_session(
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            pool_size=pool_size,
        )

    def fetch(self, url: str) -> List[DirectoryEntry]:
        """
        Retrieve the entries of one listing.

        Tries each candidate encoding in turn. A 404 or an empty listing moves
        on to the next candidate; any other failure ends the attempt.

        Args:
            url: Absolute URL or path relative to the listing root.

        Returns:
            List[DirectoryEntry]: Parsed entries, empty on any failure.
        """
        candidates = candidate_urls(url, self.base_url)

        for idx, candidate in enumerate(candidates):
            is_last = idx == len(candidates) - 1
            response = self._get(candidate)
            if response is None:
                return []

            status, body = response
            if status == 404 and not is_last:
                logger.debug(f"Network: 404 for {candidate}, retrying with alternate encoding.")
                continue
            if not 200 <= status < 300:
                logger.warning(f"Network: Listing request failed with HTTP {status}: {candidate}")
                return []

            entries = parse_directory_listing(body, candidate)
            if entries or is_last:
                logger.debug(f"Network: {len(entries)} entries at {candidate}")
                return entries
            logger.debug(f"Network: Empty listing at {candidate}, retrying with alternate encoding.")

        return []

    def close(self) -> None:
        self._session.close()

    def _get(self, url: str) -> Optional[Tuple[int, str]]:
        """Issue a GET and return (status, body), or None on transport failure."""
        try:
            response = self._session.get(url, timeout=self.timeout)
            return response.status_code, response.text
        except requests.exceptions.Timeout:
            logger.warning(f"Network: Listing request timed out after {self.timeout}s: {url}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Network: Communication error while listing {url}: {e}")
        return None
