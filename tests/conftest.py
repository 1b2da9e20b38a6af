"""Shared fakes for the explain pipeline tests."""

from __future__ import annotations

from typing import Optional

import pytest

from clarifyr.explain.pipeline import ExplainPipeline, Identity
from clarifyr.scraper.models import RawPage


class FakeFetcher:
    """Stands in for :class:`PageFetcher`; records every URL it is asked for."""

    def __init__(self, html: str = "", error: Optional[Exception] = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    def fetch(self, url: str) -> RawPage:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return RawPage(url=url, html=self.html, status_code=200)

    def close(self) -> None:
        self.closed = True


class FakeExplainer:
    """Stands in for :class:`Explainer`; records every prompt it receives."""

    def __init__(self, reply: str = "A friendly explanation.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def explain(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher(html="<html><body><p>Fetched article text.</p></body></html>")


@pytest.fixture()
def explainer() -> FakeExplainer:
    return FakeExplainer()


@pytest.fixture()
def pipeline(fetcher: FakeFetcher, explainer: FakeExplainer) -> ExplainPipeline:
    return ExplainPipeline(fetcher=fetcher, explainer=explainer, max_content_chars=15_000)


@pytest.fixture()
def identity() -> Identity:
    return Identity(id="user-1", email="learner@example.com")
