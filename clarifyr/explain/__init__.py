"""Explain package — prompt template, model client and pipeline."""

from clarifyr.explain.client import Explainer, build_llm
from clarifyr.explain.pipeline import ExplainPipeline, ExplainRequest, ExplanationResult, Identity
from clarifyr.explain.prompts import CONTENT_MARKER, build_prompt

__all__ = [
    "Explainer",
    "build_llm",
    "ExplainPipeline",
    "ExplainRequest",
    "ExplanationResult",
    "Identity",
    "CONTENT_MARKER",
    "build_prompt",
]
