"""HTTP fetcher: one bounded GET per URL, mapped to a :class:`RawPage`."""

from __future__ import annotations

import logging

import httpx

from clarifyr.config import settings
from clarifyr.errors import FetchError
from clarifyr.scraper.models import RawPage

logger = logging.getLogger(__name__)

_TEXT_TYPES = frozenset({"application/xhtml+xml", "application/xml"})


def _media_type(header: str) -> str:
    return header.split(";", 1)[0].strip().lower()


def _is_text_type(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in _TEXT_TYPES


class PageFetcher:
    """Retrieve raw HTML over a single, long-lived ``httpx.Client``.

    The client is created once (normally in the app lifespan) and shared by
    every request; it holds no per-request state.  Pass *client* to inject a
    pre-configured one, otherwise a client is built from ``settings`` with a
    browser-like User-Agent, the fetch timeout and an explicit redirect cap.
    Bodies are read up to *max_bytes*.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float | None = None,
        max_redirects: int | None = None,
        user_agent: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self.timeout = settings.fetch_timeout if timeout is None else timeout
        self.max_bytes = settings.fetch_max_bytes if max_bytes is None else max_bytes
        if client is None:
            client = httpx.Client(
                headers={"User-Agent": user_agent or settings.fetch_user_agent},
                timeout=self.timeout,
                follow_redirects=True,
                max_redirects=(
                    settings.fetch_max_redirects if max_redirects is None else max_redirects
                ),
            )
        self._client = client

    def fetch(self, url: str) -> RawPage:
        """GET *url* and return its body as a :class:`RawPage`.

        The body is streamed and cut at ``max_bytes``; only text-like
        content types (``text/*``, XHTML/XML, or none declared) are accepted.

        Raises:
            FetchError: On timeout, transport failure, too many redirects,
                an invalid URL, a non-2xx status code, or a non-text
                content type.
        """
        logger.debug("Fetching %s", url)
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                content_type = _media_type(response.headers.get("content-type", ""))
                if content_type and not _is_text_type(content_type):
                    raise FetchError(f"Unsupported content type {content_type!r} at {url}")
                body = self._read_capped(response)
                encoding = response.encoding or "utf-8"
                status_code = response.status_code
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Request timed out after {self.timeout:g}s: {url}"
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise FetchError(f"Too many redirects: {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"HTTP {exc.response.status_code} returned by {url}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(str(exc) or type(exc).__name__) from exc

        try:
            html = body.decode(encoding, errors="replace")
        except LookupError:
            html = body.decode("utf-8", errors="replace")
        return RawPage(url=url, html=html, status_code=status_code)

    def _read_capped(self, response: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        size = 0
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self.max_bytes:
                logger.info("Body of %s cut at %d bytes", response.url, self.max_bytes)
                break
        return b"".join(chunks)[: self.max_bytes]

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
