# cli/commands/patron.py
from typing import Optional
import click
from lending.enums import PatronRole
from lending.services import PatronService
from ..utils import open_session, print_field, print_patron_row, print_summary


@click.group()
def patrons():
    """Patron registration commands"""
    pass


@patrons.command()
@click.option('--first-name', required=True)
@click.option('--last-name', required=True)
@click.option('--email', required=True)
@click.option('--username', required=True)
@click.option('--phone', 'phone_number', required=True, help='10-15 digits, optional leading +')
@click.option('--date-of-birth', type=click.DateTime(formats=['%Y-%m-%d']), required=True, help='YYYY-MM-DD')
@click.option('--address', required=True)
@click.option('--role', type=click.Choice([role.value for role in PatronRole]), default=PatronRole.STUDENT.value,
              show_default=True)
@click.option('--student-id', default=None)
@click.option('--department', default=None)
@click.password_option(help='At least 8 characters')
@click.pass_context
def register(ctx, first_name, last_name, email, username, phone_number, date_of_birth, address, role,
             student_id, department, password):
    """Register a new patron"""
    with open_session(ctx) as session:
        patron = PatronService(session).register_patron({
            'first_name': first_name,
            'last_name': last_name,
            'email': email,
            'username': username,
            'phone_number': phone_number,
            'date_of_birth': date_of_birth.date(),
            'address': address,
            'role': role,
            'student_id': student_id,
            'department': department,
            'password': password,
        })
        click.echo(click.style("Successfully registered patron:", fg='green'))
        print_field("ID", patron.id)
        print_field("Name", patron.full_name)
        print_field("Borrowing limit", f"{patron.max_books_allowed} books for {patron.borrowing_period_days} days")


@patrons.command(name='list')
@click.option('--search', default=None, help='Match names, email or username')
@click.option('--page', type=click.IntRange(min=1), default=1, show_default=True)
@click.option('--size', type=click.IntRange(1, 100), default=20, show_default=True)
@click.pass_context
def list_patrons(ctx, search: Optional[str], page: int, size: int):
    """List patrons"""
    with open_session(ctx) as session:
        items, total = PatronService(session).search_patrons(search, page=page, size=size)
        for patron in items:
            print_patron_row(patron)
        print_summary("Patrons", items, total)
