"""
Command-line interface for the Monopoly GO event scraper.

Usage:
    mgo-events scrape           # Run one scrape, NDJSON records on stdout
    mgo-events scrape --pretty  # Print only the final events, indented
    mgo-events serve            # Run the streaming HTTP API
    mgo-events sample           # Print the fallback sample dataset
"""

import asyncio
import json
import sys

import click

from mgo_events.api import APIServer
from mgo_events.app import create_pipeline, init_app, run_to_stream
from mgo_events.core.models import events_by_date_to_dict
from mgo_events.core.services import build_sample_events


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """Monopoly GO event schedule scraper."""
    settings = init_app()
    if debug:
        settings.log_level = "DEBUG"
        init_app(settings)
    ctx.obj = settings


@main.command()
@click.option("--pretty", is_flag=True, help="Print only the final events as indented JSON")
@click.pass_obj
def scrape(settings, pretty: bool) -> None:
    """Run the scrape pipeline once."""
    if pretty:
        final = asyncio.run(create_pipeline(settings).collect())[-1]
        if final.events is not None:
            click.echo(json.dumps(events_by_date_to_dict(final.events), indent=2, ensure_ascii=False))
        if final.error:
            click.echo(f"Error: {final.error}", err=True)
    else:
        final = asyncio.run(run_to_stream(settings, sys.stdout))

    sys.exit(0 if final.success else 1)


@main.command()
@click.option("--host", default=None, help="Host to bind (default: API_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: API_PORT)")
@click.pass_obj
def serve(settings, host, port) -> None:
    """Run the streaming HTTP API."""
    async def run_server():
        async with APIServer(host, port, settings=settings) as server:
            click.echo(f"Serving on {server.url} (Ctrl+C to stop)", err=True)
            await server.serve_forever()

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        click.echo("Shutting down...", err=True)


@main.command()
def sample() -> None:
    """Print the fallback sample dataset."""
    click.echo(json.dumps(events_by_date_to_dict(build_sample_events()), indent=2))


if __name__ == "__main__":
    main()
