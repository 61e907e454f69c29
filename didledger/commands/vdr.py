from datetime import datetime, timezone

import click
import uvicorn

from didledger.config import settings
from didledger.dispatcher import Dispatcher
from didledger.vdr.database import SessionLocal, create_tables
from didledger.vdr.stub import sql_transaction

@click.group("vdr")
def vdr():
    """DID Ledger Gateway Server Management CLI."""
    pass


@vdr.command()
@click.option("--host", default=settings.host, show_default=True,
              help="Host to bind the server to.")
@click.option("--port", default=settings.port, show_default=True,
              help="Port to bind the server to.")
@click.option("--reload/--no-reload", default=settings.reload, show_default=True,
              help="Enable auto-reload (for development).")
def serve(host, port, reload):
    """Starts the DID ledger gateway."""
    click.echo(f"Starting server on http://{host}:{port}")
    app_string = "didledger.server:app"

    uvicorn.run(
        app_string,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
        use_colors=False,
    )


@vdr.command()
def init():
    """Creates the world-state tables and runs InitLedger against them."""
    create_tables()
    db = SessionLocal()
    try:
        with sql_transaction(db, b"", datetime.now(timezone.utc)) as stub:
            response = Dispatcher().invoke(stub, "InitLedger")
    finally:
        db.close()

    if not response.ok:
        click.echo(click.style(f"Failed to initialize ledger: {response.message}", fg="red"), err=True)
        return
    click.echo(click.style(response.payload, fg="green"))
    click.echo(f"World state database: {settings.database_url}")
