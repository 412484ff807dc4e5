"""Loading package indices over HTTP.

Remote indices are fetched in full before resolution starts; the resolver
itself never performs I/O. httpx is an optional dependency, installed with
``pip install 'specresolve[remote]'``.
"""

from __future__ import annotations

import logging
from typing import Any

from specresolve import __version__
from specresolve.core.sources.index import parse_index
from specresolve.core.sources.memory import InMemorySource
from specresolve.exceptions import ManifestError, SourceError

logger = logging.getLogger(__name__)

# Timeout for index requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

USER_AGENT: str = f"specresolve/{__version__}"


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Lazily import httpx and raise a friendly error if missing."""
    try:
        import httpx

        return httpx
    except ImportError as exc:
        raise SourceError(
            "httpx is required for remote indices.\n"
            "Install it with: pip install 'specresolve[remote]'"
        ) from exc


def fetch_index(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Any = None,
) -> InMemorySource:
    """Download a JSON package index and load it into memory.

    Args:
        url: Location of the index document.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.

    Returns:
        An ``InMemorySource`` holding every specification of the index.

    Raises:
        SourceError: On HTTP errors, timeouts, or a malformed document.
    """
    httpx = _ensure_httpx()
    try:
        with httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        ) as client:
            resp = client.get(url)
            resp.raise_for_status()
            data = resp.json()
    except httpx.TimeoutException as exc:
        logger.warning("Timeout fetching %s", url)
        raise SourceError(f"Timed out fetching index {url}") from exc
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP %d from %s", exc.response.status_code, url)
        raise SourceError(
            f"Index {url} answered with HTTP {exc.response.status_code}"
        ) from exc
    except (httpx.RequestError, ValueError) as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise SourceError(f"Unable to fetch index {url}: {exc}") from exc

    try:
        specs = parse_index(data)
    except ManifestError as exc:
        raise SourceError(f"Malformed index {url}: {exc}") from exc
    logger.info("Loaded %d specification(s) from %s", len(specs), url)
    return InMemorySource(specs, name=url)
