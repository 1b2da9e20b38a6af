"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from clarifyr.api import app

    uvicorn clarifyr.api:app --reload
"""

from clarifyr.api.app import app

__all__ = ["app"]
