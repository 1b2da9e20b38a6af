"""Explain pipeline orchestrator.

``ExplainPipeline.run`` turns an :class:`ExplainRequest` into an
:class:`ExplanationResult`:

    url  → fetch → sanitize → truncate ┐
    text → truncate ───────────────────┴→ build_prompt → explain → result

The fetcher and explainer are injected so the pipeline can be driven with
fakes in tests.  Every failure surfaces from ``run`` as an
:class:`~clarifyr.errors.ExplainError`; anything unclassified is reported as
a :class:`~clarifyr.errors.ModelError`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from clarifyr.config import Settings, settings
from clarifyr.errors import ExplainError, ModelError, ValidationError
from clarifyr.explain.client import Explainer, build_llm
from clarifyr.explain.prompts import build_prompt
from clarifyr.scraper.fetcher import PageFetcher
from clarifyr.scraper.models import RawPage
from clarifyr.scraper.sanitizer import sanitize
from clarifyr.scraper.truncator import truncate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------

class Fetcher(Protocol):
    def fetch(self, url: str) -> RawPage: ...


class ExplainerClient(Protocol):
    def explain(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Request / result types
# ---------------------------------------------------------------------------

@dataclass
class ExplainRequest:
    url: str | None = None
    text: str | None = None


@dataclass
class Identity:
    """The authenticated caller, as supplied by the auth collaborator."""

    id: str
    email: str | None = None

    @property
    def label(self) -> str:
        return self.email or self.id


@dataclass
class ExplanationResult:
    explained_for_user: str
    source: str
    explanation: str
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "explainedForUser": self.explained_for_user,
            "source": self.source,
            "explanation": self.explanation,
        }


class Stage(str, enum.Enum):
    START = "start"
    MODE_URL = "mode_url"
    MODE_TEXT = "mode_text"
    CONTENT_READY = "content_ready"
    PROMPTED = "prompted"
    EXPLAINED = "explained"


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class ExplainPipeline:
    def __init__(
        self,
        fetcher: Fetcher,
        explainer: ExplainerClient,
        max_content_chars: int = 15_000,
    ) -> None:
        if max_content_chars <= 0:
            raise ValueError("max_content_chars must be positive")
        self.fetcher = fetcher
        self.explainer = explainer
        self.max_content_chars = max_content_chars

    @classmethod
    def from_settings(cls, config: Settings = settings) -> ExplainPipeline:
        """Build the production pipeline: shared HTTP client plus chat model."""
        return cls(
            fetcher=PageFetcher(
                timeout=config.fetch_timeout,
                max_redirects=config.fetch_max_redirects,
                user_agent=config.fetch_user_agent,
                max_bytes=config.fetch_max_bytes,
            ),
            explainer=Explainer(build_llm(config)),
            max_content_chars=config.max_content_chars,
        )

    def acquire(self, request: ExplainRequest) -> tuple[str, str]:
        """Return ``(source, content)`` for *request*, bounded in length.

        A non-blank ``url`` wins over ``text``.  Truncation applies to both
        paths.
        """
        url = (request.url or "").strip()
        if url:
            raw = self.fetcher.fetch(url)
            return "url", truncate(sanitize(raw.html), self.max_content_chars)
        return "text", truncate(request.text or "", self.max_content_chars)

    def run(self, request: ExplainRequest, identity: Identity) -> ExplanationResult:
        """Explain *request* on behalf of *identity*.

        Raises:
            ValidationError: Neither input produced any content.
            FetchError: The URL could not be retrieved.
            ModelError: The model call failed, or anything unexpected broke.
        """
        stage = Stage.START
        try:
            stage = Stage.MODE_URL if (request.url or "").strip() else Stage.MODE_TEXT
            source, content = self.acquire(request)
            if not content.strip():
                raise ValidationError("No content to explain")

            stage = Stage.CONTENT_READY
            prompt = build_prompt(content)

            stage = Stage.PROMPTED
            explanation = self.explainer.explain(prompt)
            stage = Stage.EXPLAINED
        except ExplainError as exc:
            logger.warning(
                "Explain failed at %s (%s) for %s: %s",
                stage.value, exc.kind, identity.label, exc,
            )
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Unexpected failure at %s for %s", stage.value, identity.label
            )
            raise ModelError(exc) from exc

        logger.info(
            "Explained %s content (%d chars) for %s",
            source, len(content), identity.label,
        )
        return ExplanationResult(
            explained_for_user=identity.label,
            source=source,
            explanation=explanation,
        )
