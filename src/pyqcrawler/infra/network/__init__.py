from __future__ import annotations

"""
Network Communication Infrastructure.

Exposes the remote directory-listing client and the shared HTTP session
factory used by the crawl engine.
"""

from pyqcrawler.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT, create_session
from pyqcrawler.infra.network.listing_client import (
    ListingClient,
    build_listing_url,
    candidate_urls,
    parse_directory_listing,
    relative_path,
)

__all__ = [
    "ListingClient",
    "build_listing_url",
    "candidate_urls",
    "parse_directory_listing",
    "relative_path",
    "create_session",
    "USER_AGENT",
    "DEFAULT_TIMEOUT",
]
