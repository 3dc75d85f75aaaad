# cli/commands/loan.py
from typing import Optional
import click
from lending.services import LendingService
from ..utils import open_session, print_record, print_summary


@click.group()
def loans():
    """Borrowing, returning and renewing loans"""
    pass


@loans.command()
@click.argument('patron_id', type=int)
@click.argument('book_id', type=int)
@click.option('--due-date', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help='Override the due date (YYYY-MM-DD)')
@click.option('--notes', default=None)
@click.pass_context
def borrow(ctx, patron_id: int, book_id: int, due_date, notes: Optional[str]):
    """Lend BOOK_ID to PATRON_ID

    Example:
        library-lending loans borrow 1 42
        library-lending loans borrow 1 42 --due-date 2030-01-31 --notes "Course reserve"
    """
    with open_session(ctx) as session:
        service = LendingService(session)
        record = service.borrow_book(
            patron_id, book_id, expected_return_date=due_date.date() if due_date else None, notes=notes
        )
        click.echo(click.style("Loan created", fg='green'))
        print_record(record, service.today())


@loans.command(name='return')
@click.argument('record_id', type=int)
@click.option('--notes', default=None)
@click.pass_context
def return_loan(ctx, record_id: int, notes: Optional[str]):
    """Return the book on loan RECORD_ID"""
    with open_session(ctx) as session:
        service = LendingService(session)
        record = service.return_book(record_id, notes=notes)
        click.echo(click.style("Book returned", fg='green'))
        if record.fine_amount:
            click.echo(click.style(f"Late return: fine of {record.fine_amount:.2f} charged", fg='red'))
        print_record(record, service.today())


@loans.command()
@click.argument('record_id', type=int)
@click.option('--days', type=int, default=None, help="Extension in days (default: the patron's loan period)")
@click.pass_context
def renew(ctx, record_id: int, days: Optional[int]):
    """Extend the due date of loan RECORD_ID"""
    with open_session(ctx) as session:
        service = LendingService(session)
        record = service.renew_loan(record_id, additional_days=days)
        click.echo(click.style(f"Loan renewed, now due {record.expected_return_date}", fg='green'))
        print_record(record, service.today())


@loans.command(name='pay-fine')
@click.argument('record_id', type=int)
@click.option('--amount', type=float, default=None, help='Amount tendered; must equal the fine')
@click.pass_context
def pay_fine(ctx, record_id: int, amount: Optional[float]):
    """Settle the fine on loan RECORD_ID"""
    with open_session(ctx) as session:
        service = LendingService(session)
        record = service.pay_fine(record_id, amount=amount)
        click.echo(click.style(f"Fine of {record.fine_amount:.2f} paid", fg='green'))
        print_record(record, service.today())


@loans.command()
@click.pass_context
def overdue(ctx):
    """List loans past their due date"""
    with open_session(ctx) as session:
        service = LendingService(session)
        today = service.today()
        records = service.overdue_records()
        for record in records:
            print_record(record, today)
            click.echo(click.style(f"  {record.days_overdue(today)} days overdue", fg='red'))
        print_summary("Overdue loans", records)
