"""Process-wide logging setup."""

from __future__ import annotations

import logging

from clarifyr.config import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the root logger at *level*.

    Safe to call more than once; ``logging.basicConfig`` is a no-op when the
    root logger already has handlers.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=_FORMAT,
    )
