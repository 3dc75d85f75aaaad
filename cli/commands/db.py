# cli/commands/db.py
import click


@click.group()
def db():
    """Database commands"""
    pass


@db.command()
@click.pass_context
def init(ctx):
    """Create the schema"""
    database = ctx.obj['database']
    database.init_db()
    click.echo(click.style("Database initialized", fg='green'))
