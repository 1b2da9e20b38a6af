"""Explain endpoint.

Routes
------
POST /api/explain    Body: {"url": "https://..."} or {"text": "..."}

Requires ``Authorization: Bearer <token>``.  Failures are raised as
:class:`~clarifyr.errors.ExplainError` and rendered by the handlers
registered in :mod:`clarifyr.api.app`.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from clarifyr.api.auth import get_identity
from clarifyr.explain.pipeline import ExplainRequest, Identity

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ExplainBody(BaseModel):
    url: Optional[str] = None
    text: Optional[str] = None


class ExplainResponse(BaseModel):
    success: bool
    explainedForUser: str
    source: str
    explanation: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/explain", response_model=ExplainResponse)
def explain_endpoint(
    body: ExplainBody,
    request: Request,
    identity: Identity = Depends(get_identity),
) -> dict[str, Any]:
    """Explain the posted text, or the page at the posted URL, for a beginner."""
    pipeline = request.app.state.pipeline
    result = pipeline.run(ExplainRequest(url=body.url, text=body.text), identity)
    return result.to_dict()
