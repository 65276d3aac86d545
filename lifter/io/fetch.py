"""
HTTP(S) page fetching and artifact download for lifter.

This module is the only place lifter talks to the network. Both the
release-page fetch and the artifact download use a session from
make_session(), which mounts a urllib3 Retry on its transport adapters.

Key Features:

- **Retry with Linear Backoff** - Up to 10 attempts. Retries on transient
  statuses (408, 425, 429, 500, 502, 503, 504) and on connection failures
  or timeouts. Before each retry urllib3 sleeps
  `min(60, attempts_so_far * 4)` seconds: 4, 8, 12, ... capped at 60.
  Retry-After headers are ignored.
- **Terminal Statuses** - Any other non-2xx status raises UnexpectedStatus
  immediately, carrying the status code and response body.
- **Browser User-Agent** - Every request carries a desktop browser
  User-Agent; some release hosts reject default client agents.
- **Streaming Progress** - Downloads stream in 1 MiB chunks and report the
  fraction complete when Content-Length is known.

Exception Classes:

- FetchError: Transport failure, or a retryable status that persisted
  through every attempt.
- UnexpectedStatus: Non-retryable HTTP status.

Example:
Fetch a page:

    >>> from lifter.io import fetch_text
    >>> html = fetch_text("https://github.com/BurntSushi/ripgrep/releases")

Download with progress:

    >>> from lifter.io import download_bytes
    >>> data = download_bytes(
    ...     "https://example.com/tool.tar.gz",
    ...     on_progress=lambda frac: print(f"{frac:.0%}"),
    ... )

Notes:
- Sessions are not shared between threads; the orchestrator creates one
  per section run.
- Artifacts are held in memory. Partial or resumed downloads are not
  supported.
- Timeouts are per-request, not total download time.
"""

from __future__ import annotations

from collections.abc import Callable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from lifter.exceptions import FetchError, UnexpectedStatus
from lifter.logging import Logger, get_global_logger

MAX_ATTEMPTS = 10
BACKOFF_STEP = 4
MAX_BACKOFF = 60
RETRY_STATUSES = frozenset({408, 425, 429, 500, 502, 503, 504})

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024
DEFAULT_TIMEOUT = 60

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class LinearRetry(Retry):
    """Retry whose backoff grows by BACKOFF_STEP seconds per failed attempt."""

    def get_backoff_time(self) -> float:
        return min(MAX_BACKOFF, len(self.history) * BACKOFF_STEP)


def make_session() -> requests.Session:
    """
    Create a requests.Session with the lifter retry policy and User-Agent.

    - Retries GET on RETRY_STATUSES, connection errors and read timeouts.
    - Gives up after MAX_ATTEMPTS requests and hands back the last response
      instead of raising, so the caller can report the final status.
    """
    s = requests.Session()
    retries = LinearRetry(
        total=MAX_ATTEMPTS - 1,
        status_forcelist=RETRY_STATUSES,
        allowed_methods={"GET"},
        respect_retry_after_header=False,
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": USER_AGENT})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def _get(
    session: requests.Session,
    url: str,
    *,
    stream: bool,
    timeout: int,
    logger: Logger,
    prefix: str,
) -> requests.Response:
    """GET `url` through the session's retry adapter. Returns a 2xx response."""
    try:
        resp = session.get(url, stream=stream, timeout=timeout, allow_redirects=True)
    except (requests.exceptions.ConnectionError, requests.exceptions.RetryError) as err:
        raise FetchError(
            f"Failed to fetch {url} after {MAX_ATTEMPTS} attempts: {err}", url=url
        ) from err
    except requests.exceptions.RequestException as err:
        raise FetchError(f"Failed to fetch {url}: {err}", url=url) from err

    status = resp.status_code
    if 200 <= status < 300:
        logger.debug(prefix, f"Response: {status} {resp.reason}")
        return resp

    if status in RETRY_STATUSES:
        resp.close()
        raise FetchError(
            f"Failed to fetch {url}: HTTP {status} after {MAX_ATTEMPTS} attempts",
            url=url,
            status_code=status,
        )

    body = resp.text
    resp.close()
    raise UnexpectedStatus(url, status, body)

def fetch_text(
    url: str,
    *,
    session: requests.Session | None = None,
    timeout: int = DEFAULT_TIMEOUT,
    logger: Logger | None = None,
    prefix: str = "HTTP",
) -> str:
    """Fetch a page or API response body as text.

    Args:
        url: Page URL.
        session: Session to reuse, normally from make_session(). A fresh
            one is created (and closed) if omitted.
        timeout: Per-request timeout (seconds).
        logger: Optional logger; falls back to the global logger.
        prefix: Log prefix, usually the section name.

    Returns:
        The decoded response body.

    Raises:
        UnexpectedStatus: On a non-retryable, non-2xx status.
        FetchError: On transport failure or retries exhausted.
    """
    if logger is None:
        logger = get_global_logger()

    logger.debug(prefix, f"Fetching page at {url}")
    if session is None:
        with make_session() as own:
            resp = _get(
                own, url, stream=False, timeout=timeout, logger=logger, prefix=prefix
            )
    else:
        resp = _get(
            session, url, stream=False, timeout=timeout, logger=logger, prefix=prefix
        )

    body = resp.text
    logger.debug(prefix, f"Page fetched ({len(body)} chars)")
    return body


def download_bytes(
    url: str,
    *,
    session: requests.Session | None = None,
    on_progress: Callable[[float], None] | None = None,
    timeout: int = DEFAULT_TIMEOUT,
    logger: Logger | None = None,
    prefix: str = "HTTP",
) -> bytes:
    """Download an artifact into memory.

    Args:
        url: Artifact URL.
        session: Session to reuse, normally from make_session(). A fresh
            one is created (and closed) if omitted.
        on_progress: Called with the fraction complete (0.0-1.0) as chunks
            arrive. When the server sends no Content-Length it is called once
            with 1.0 at the end.
        timeout: Per-request timeout (seconds).
        logger: Optional logger; falls back to the global logger.
        prefix: Log prefix, usually the section name.

    Returns:
        The artifact bytes.

    Raises:
        UnexpectedStatus: On a non-retryable, non-2xx status.
        FetchError: On transport failure, retries exhausted, or a connection
            dropped mid-stream.
    """
    if logger is None:
        logger = get_global_logger()

    if session is None:
        with make_session() as own:
            return download_bytes(
                url,
                session=own,
                on_progress=on_progress,
                timeout=timeout,
                logger=logger,
                prefix=prefix,
            )

    logger.debug(prefix, f"GET {url}")
    resp = _get(
        session, url, stream=True, timeout=timeout, logger=logger, prefix=prefix
    )

    total_size = int(resp.headers.get("Content-Length", "0") or 0)
    if total_size:
        logger.debug(prefix, f"Content-Length: {total_size} ({total_size / 1048576:.1f} MB)")

    chunks: list[bytes] = []
    downloaded = 0
    try:
        for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
            if not chunk:
                continue
            chunks.append(chunk)
            downloaded += len(chunk)
            if total_size and on_progress is not None:
                on_progress(min(1.0, downloaded / total_size))
    except requests.exceptions.RequestException as err:
        raise FetchError(f"Download of {url} interrupted: {err}", url=url) from err
    finally:
        resp.close()

    if not total_size and on_progress is not None:
        on_progress(1.0)

    logger.debug(prefix, f"Downloaded {downloaded} bytes from {url}")
    return b"".join(chunks)
