from __future__ import annotations

import asyncio
import json
import mimetypes
from pathlib import Path
from typing import Optional

import typer

from doc_relay.app.core.logging import setup_logging
from doc_relay.exceptions import DocRelayError
from doc_relay.factory import service_from_env

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Document relay service tools.")


@app.command("serve")
def serve(
        host: str = typer.Option("0.0.0.0", help="Bind address"),
        port: int = typer.Option(8000, envvar="PORT", help="Bind port"),
        reload: bool = typer.Option(False, help="Auto-reload on code changes (dev only)"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    setup_logging()
    uvicorn.run(
        "doc_relay.api.fastapi:create_and_register_api",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@app.command("ingest")
def ingest(
        path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File to upload"),
        display_name: Optional[str] = typer.Option(None, "--name", help="Display name / public id"),
        description: Optional[str] = typer.Option(None, help="Free-text description"),
        sharing_url: Optional[str] = typer.Option(None, help="External sharing link to derive a download URL from"),
        media_type: Optional[str] = typer.Option(None, help="Override the guessed media type"),
):
    """Upload a local file through the same pipeline as POST /artifacts."""
    setup_logging()
    declared = media_type or mimetypes.guess_type(path.name)[0]

    async def _run():
        async with service_from_env() as service:
            with path.open("rb") as fh:
                return await service.ingest(
                    fh,
                    media_type=declared,
                    original_filename=path.name,
                    display_name=display_name,
                    description=description,
                    sharing_url=sharing_url,
                )

    try:
        result = asyncio.run(_run())
    except DocRelayError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps({
        "artifact_id": result.artifact_id,
        "storage_locator": result.storage_locator,
        "derived_download_locator": result.derived_download_locator,
    }))


@app.command("resolve")
def resolve(artifact_id: str = typer.Argument(..., help="Artifact id returned by ingest")):
    """Print the download URL for an artifact."""
    setup_logging()

    async def _run():
        async with service_from_env() as service:
            return await service.resolve(artifact_id)

    try:
        link = asyncio.run(_run())
    except DocRelayError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(link.url)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
