# cli/main.py
import click
from lending import __version__
from lending.config import settings, configure_logging
from lending.sa.database import Database
from .commands.db import db
from .commands.book import books
from .commands.patron import patrons
from .commands.loan import loans
from .commands.serve import serve


@click.group()
@click.option('--database-url', default=None, help='Database URL (default: DATABASE_URL or sqlite:///library.db)')
@click.option('--log-level', default=None, type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (default: LOG_LEVEL or INFO)')
@click.version_option(__version__)
@click.pass_context
def cli(ctx, database_url, log_level):
    """Library lending CLI"""
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj['database'] = Database(database_url)


cli.add_command(db)
cli.add_command(books)
cli.add_command(patrons)
cli.add_command(loans)
cli.add_command(serve)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
