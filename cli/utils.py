# cli/utils.py
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional
import click
from sqlalchemy.orm import Session
from lending.exceptions import LibraryError
from lending.enums import display_name


@contextmanager
def open_session(ctx: click.Context) -> Iterator[Session]:
    """Session on the database chosen by the root group.

    A LibraryError raised inside the block is printed in red and ends the
    command with exit code 1.
    """
    session = ctx.obj['database'].get_session()
    try:
        yield session
    except LibraryError as e:
        click.echo(click.style(f"Error: {e.message}", fg='red'), err=True)
        ctx.exit(1)
    finally:
        session.close()


def print_field(label: str, value: Any, color: str = 'cyan') -> None:
    click.echo(click.style(f"{label}: ", fg='blue') + click.style(str(value), fg=color))


def print_book(book) -> None:
    click.echo("\n" + click.style(book.title, fg='green', bold=True) + click.style(f" by {book.author}", fg='blue'))
    print_field("ID", book.id)
    print_field("ISBN", book.isbn)
    print_field("Category", book.category)
    print_field("Copies", f"{book.copies_available}/{book.total_copies}")
    print_field("Status", display_name(book.status), 'green' if book.is_available else 'yellow')


def print_book_row(book) -> None:
    color = 'green' if book.is_available else 'yellow'
    click.echo(
        click.style(f"{book.id:>5} ", fg='cyan') +
        click.style(f"{book.title[:40]:<40} ", fg='white') +
        click.style(f"{book.author[:25]:<25} ", fg='blue') +
        click.style(f"{book.copies_available}/{book.total_copies} {display_name(book.status)}", fg=color)
    )


def print_patron_row(patron) -> None:
    color = 'green' if patron.can_borrow_books else 'yellow'
    click.echo(
        click.style(f"{patron.id:>5} ", fg='cyan') +
        click.style(f"{patron.username:<20} ", fg='white') +
        click.style(f"{patron.full_name[:30]:<30} ", fg='blue') +
        click.style(f"{display_name(patron.role)} / {display_name(patron.status)}", fg=color)
    )


def print_record(record, today) -> None:
    click.echo(
        "\n" + click.style(f"Loan {record.id}: ", fg='green', bold=True) +
        click.style(f"'{record.book.title}' to {record.patron.full_name}", fg='blue')
    )
    print_field("Status", display_name(record.status))
    print_field("Borrowed", record.borrowed_date)
    print_field("Due", record.expected_return_date, 'red' if record.is_overdue(today) else 'cyan')
    if record.actual_return_date:
        print_field("Returned", record.actual_return_date)
    print_field("Renewals", f"{record.renewal_count}/{record.max_renewals}")
    if record.fine_amount:
        paid = f" (paid {record.fine_paid_date})" if record.is_fine_paid else " (unpaid)"
        print_field("Fine", f"{record.fine_amount:.2f}{paid}", 'green' if record.is_fine_paid else 'red')


def print_summary(title: str, items: List[Any], total: Optional[int] = None) -> None:
    shown = len(items)
    total = shown if total is None else total
    click.echo(click.style(f"\n{title}: ", fg='blue') + click.style(f"showing {shown} of {total}", fg='cyan'))
