from datetime import datetime

import click
from flask import current_app
from werkzeug.security import generate_password_hash

from library_app.errors import AppError
from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.borrow import BorrowRecord, BorrowStatus
from library_app.models.user import Role, User
from library_app.services.auth_service import AuthService

# Demo veri seti (eski statik arayüzün mock verisi)
DEMO_USERS = [
    ("admin", "admin@library.com", "Admin123!", Role.ADMIN),
    ("johndoe", "john@example.com", "User123!", Role.MEMBER),
    ("janesmith", "jane@example.com", "User123!", Role.MEMBER),
]

DEMO_BOOKS = [
    ("To Kill a Mockingbird", "Harper Lee", "978-0-06-112008-4"),
    ("1984", "George Orwell", "978-0-452-28423-4"),
    ("Pride and Prejudice", "Jane Austen", "978-0-14-143951-8"),
    ("The Great Gatsby", "F. Scott Fitzgerald", "978-0-7432-7356-5"),
    ("Harry Potter and the Philosopher's Stone", "J.K. Rowling", "978-0-439-70818-8"),
    ("The Catcher in the Rye", "J.D. Salinger", "978-0-316-76948-0"),
    ("Lord of the Flies", "William Golding", "978-0-571-05686-2"),
    ("The Hobbit", "J.R.R. Tolkien", "978-0-547-92822-7"),
]

# (username, isbn, borrowed_at, returned_at)
DEMO_BORROWS = [
    ("johndoe", "978-0-452-28423-4", datetime(2024, 2, 15), None),
    ("janesmith", "978-0-439-70818-8", datetime(2024, 3, 1), None),
    ("johndoe", "978-0-547-92822-7", datetime(2024, 3, 15), None),
    ("johndoe", "978-0-06-112008-4", datetime(2024, 1, 20), datetime(2024, 2, 10)),
]


def seed_demo_data():
    """Insert the demo dataset; book availability is derived from the open records."""
    users = {}
    for username, email, password, role in DEMO_USERS:
        user = User.query.filter_by(email=email).first()
        if not user:
            user = User(username=username, email=email, password_hash=generate_password_hash(password), role=role)
            db.session.add(user)
        users[username] = user

    books = {}
    for title, author, isbn in DEMO_BOOKS:
        book = Book.query.filter_by(isbn=isbn).first()
        if not book:
            book = Book(title=title, author=author, isbn=isbn, available=True)
            db.session.add(book)
        books[isbn] = book
    db.session.flush()

    for username, isbn, borrowed_at, returned_at in DEMO_BORROWS:
        user, book = users[username], books[isbn]
        exists = BorrowRecord.query.filter_by(user_id=user.id, book_id=book.id, borrowed_at=borrowed_at).first()
        if exists:
            continue
        status = BorrowStatus.RETURNED if returned_at else BorrowStatus.BORROWED
        if status == BorrowStatus.BORROWED:
            if not book.available:
                continue
            book.available = False
        db.session.add(BorrowRecord(
            user_id=user.id, book_id=book.id, borrowed_at=borrowed_at, returned_at=returned_at, status=status
        ))

    db.session.commit()
    return len(users), len(books)


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-admin")
    @click.option("--username", required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True, prompt=True, hide_input=True)
    def create_admin(username, email, password):
        """Create an ADMIN account."""
        try:
            user = AuthService.register(username=username, email=email, password=password, role=Role.ADMIN)
        except AppError as e:
            raise click.ClickException(e.message)
        click.echo(f"Admin {user.username} created (id={user.id}).")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Load the demo users, books and borrow history."""
        db.create_all()
        user_count, book_count = seed_demo_data()
        current_app.logger.info(f"[seed] Demo data loaded: {user_count} users, {book_count} books")
        click.echo(f"Seeded {user_count} users and {book_count} books.")
