# cli/commands/serve.py
import os
import click
from lending.config import settings
from lending.sa.database import set_database


@click.command()
@click.option('--host', default=settings.api_host, show_default=True)
@click.option('--port', type=int, default=settings.api_port, show_default=True)
@click.option('--reload/--no-reload', default=False, help='Restart the server when code changes')
@click.pass_context
def serve(ctx, host: str, port: int, reload: bool):
    """Run the REST API with uvicorn"""
    import uvicorn

    database = ctx.obj['database']
    # The reloader imports the app in a fresh process that reads DATABASE_URL again
    os.environ['DATABASE_URL'] = database.connection_string
    set_database(database)
    click.echo(click.style(f"Serving on http://{host}:{port}", fg='blue'))
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)
