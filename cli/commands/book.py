# cli/commands/book.py
from typing import Optional
import click
from lending.services import BookService
from ..utils import open_session, print_book, print_book_row, print_field, print_summary

ISO_DATE = click.DateTime(formats=['%Y-%m-%d'])


@click.group()
def books():
    """Catalog and copy inventory commands"""
    pass


@books.command()
@click.option('--title', required=True)
@click.option('--author', required=True)
@click.option('--isbn', required=True, help='ISBN-10 or ISBN-13, hyphens allowed')
@click.option('--publisher', required=True)
@click.option('--publication-date', type=ISO_DATE, required=True, help='YYYY-MM-DD')
@click.option('--category', required=True)
@click.option('--pages', type=click.IntRange(1, 10000), required=True)
@click.option('--price', type=float, required=True)
@click.option('--copies', type=click.IntRange(min=1), default=1, show_default=True, help='Total copies')
@click.option('--language', default='English', show_default=True)
@click.option('--description', default=None)
@click.pass_context
def add(ctx, title, author, isbn, publisher, publication_date, category, pages, price, copies, language, description):
    """Add a title to the catalog

    Example:
        library-lending books add --title "Dune" --author "Frank Herbert" --isbn 9780441172719 \\
            --publisher Ace --publication-date 1965-08-01 --category Fiction --pages 412 --price 9.99 --copies 3
    """
    with open_session(ctx) as session:
        book = BookService(session).create_book({
            'title': title,
            'author': author,
            'isbn': isbn,
            'publisher': publisher,
            'publication_date': publication_date.date(),
            'category': category,
            'pages': pages,
            'price': price,
            'total_copies': copies,
            'language': language,
            'description': description,
        })
        click.echo(click.style("Successfully created book:", fg='green'))
        print_book(book)


@books.command()
@click.argument('book_id', type=int, required=False)
@click.option('--isbn', default=None, help='Look the book up by ISBN instead of ID')
@click.pass_context
def show(ctx, book_id: Optional[int], isbn: Optional[str]):
    """Show one book"""
    if book_id is None and not isbn:
        raise click.UsageError("Give a BOOK_ID or --isbn")
    with open_session(ctx) as session:
        service = BookService(session)
        book = service.get_book_by_isbn(isbn) if isbn else service.get_book(book_id)
        print_book(book)
        print_field("Publisher", book.publisher)
        print_field("Published", book.publication_date)
        print_field("Availability", f"{book.availability_percentage:.0f}%")


@books.command(name='list')
@click.option('--search', default=None, help='Full-text search over title, author, category, publisher and description')
@click.option('--page', type=click.IntRange(min=1), default=1, show_default=True)
@click.option('--size', type=click.IntRange(1, 100), default=20, show_default=True)
@click.pass_context
def list_books(ctx, search: Optional[str], page: int, size: int):
    """List the catalog"""
    with open_session(ctx) as session:
        service = BookService(session)
        if search:
            items, total = service.full_text_search(search, page=page, size=size)
        else:
            items, total = service.list_books(page=page, size=size)
        for book in items:
            print_book_row(book)
        print_summary("Books", items, total)


@books.command(name='add-copies')
@click.argument('book_id', type=int)
@click.argument('count', type=int)
@click.pass_context
def add_copies(ctx, book_id: int, count: int):
    """Add COUNT copies of a book to the shelf"""
    with open_session(ctx) as session:
        book = BookService(session).add_copies(book_id, count)
        click.echo(click.style(f"Added {count} copies", fg='green'))
        print_book(book)


@books.command(name='remove-copies')
@click.argument('book_id', type=int)
@click.argument('count', type=int)
@click.pass_context
def remove_copies(ctx, book_id: int, count: int):
    """Withdraw COUNT shelf copies of a book"""
    with open_session(ctx) as session:
        book = BookService(session).remove_copies(book_id, count)
        click.echo(click.style(f"Removed {count} copies", fg='green'))
        print_book(book)


@books.command()
@click.argument('book_id', type=int)
@click.confirmation_option(prompt='Delete this book from the catalog?')
@click.pass_context
def delete(ctx, book_id: int):
    """Remove a book from the catalog (it must have no loans out)"""
    with open_session(ctx) as session:
        BookService(session).delete_book(book_id)
        click.echo(click.style(f"Deleted book {book_id}", fg='green'))


@books.command()
@click.pass_context
def stats(ctx):
    """Inventory statistics"""
    with open_session(ctx) as session:
        figures = BookService(session).statistics()
        click.echo("\n" + click.style("Catalog statistics", fg='blue', bold=True))
        print_field("Total books", figures['total_books'])
        print_field("Available", figures['available_books'], 'green')
        print_field("Borrowed", figures['borrowed_books'], 'yellow')
        print_field("Overdue", figures['overdue_books'], 'red')
        print_field("Needing restock", figures['books_needing_restock'], 'yellow')
        print_field("Average availability", f"{figures['average_availability_percentage']:.2f}%")
