"""Clarifyr CLI — explain text or a web page from the terminal.

Usage:
    python cli/main.py --help

Commands:
    explain   → run the explain pipeline once and print the result
    serve     → start the HTTP API under uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from clarifyr.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import Optional

import typer

from clarifyr.config import settings
from clarifyr.errors import ExplainError
from clarifyr.explain.pipeline import ExplainPipeline, ExplainRequest, Identity
from clarifyr.logs import configure_logging

app = typer.Typer(
    name="clarify",
    help="Clarifyr CLI.",
    no_args_is_help=True,
)

# The CLI has no auth collaborator; results are attributed to this identity.
CLI_IDENTITY = Identity(id="cli")


def _build_pipeline() -> ExplainPipeline:
    return ExplainPipeline.from_settings()


@app.command("explain")
def explain(
    text: Optional[str] = typer.Option(None, help="Text to explain."),
    url: Optional[str] = typer.Option(None, help="URL of a page to explain."),
    as_json: bool = typer.Option(False, "--json", help="Print the full JSON result."),
) -> None:
    """Explain a piece of text, or the readable content of a URL."""
    configure_logging()
    if not text and not url:
        typer.echo("[explain] Provide --text or --url.", err=True)
        raise typer.Exit(1)

    pipeline = _build_pipeline()
    if url:
        typer.echo(f"[explain] Fetching {url!r} …", err=True)
    try:
        result = pipeline.run(ExplainRequest(url=url, text=text), CLI_IDENTITY)
    except ExplainError as exc:
        typer.echo(f"[explain] {exc}", err=True)
        raise typer.Exit(1)
    finally:
        pipeline.fetcher.close()

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(result.explanation)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(3000, envvar="PORT", help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    configure_logging()
    uvicorn.run(
        "clarifyr.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
