"""Scraper package — URL fetch, HTML sanitization and length bounding."""

from clarifyr.scraper.fetcher import PageFetcher
from clarifyr.scraper.models import RawPage
from clarifyr.scraper.sanitizer import sanitize
from clarifyr.scraper.truncator import TRUNCATION_MARKER, truncate

__all__ = ["PageFetcher", "RawPage", "sanitize", "truncate", "TRUNCATION_MARKER"]
