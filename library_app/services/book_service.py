from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from library_app.errors import ConflictError, NotFoundError, StoreError
from library_app.extensions import db
from library_app.models.book import Book
from library_app.repositories.book_repo import BookRepo
from library_app.schemas import BookIn, BookQuery, BookUpdateIn
from library_app.utils.clock import utcnow


class BookService:
    @staticmethod
    def list_books(query: BookQuery):
        return BookRepo.list_filtered(
            search=query.search,
            search_by=query.search_by,
            available=query.available,
            page=query.page,
            limit=query.limit,
        )

    @staticmethod
    def list_available(page: int, limit: int):
        return BookRepo.list_filtered(available=True, page=page, limit=limit)

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found", code="BOOK_NOT_FOUND")
        return book

    @staticmethod
    def create_book(data: BookIn):
        if BookRepo.get_by_isbn(data.isbn):
            raise ConflictError("Book with this ISBN already exists", code="BOOK_EXISTS")

        # yeni kitabın açık kaydı olamaz, bu yüzden her zaman available
        book = Book(title=data.title, author=data.author, isbn=data.isbn, available=True)
        BookRepo.create(book)
        BookService._commit("adding book", duplicate_code="BOOK_EXISTS")

        current_app.logger.info(f"[catalog] Book {book.id} added (isbn={book.isbn})")
        return book

    @staticmethod
    def update_book(book_id: int, data: BookUpdateIn):
        book = BookService.get_book(book_id)
        changes = data.changes()

        new_isbn = changes.get("isbn")
        if new_isbn and new_isbn != book.isbn:
            other = BookRepo.get_by_isbn(new_isbn)
            if other and other.id != book.id:
                raise ConflictError("ISBN already exists", code="ISBN_EXISTS")

        try:
            BookRepo.update(book, changes, utcnow())
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("ISBN already exists", code="ISBN_EXISTS")
        BookService._commit("updating book", duplicate_code="ISBN_EXISTS")
        current_app.logger.info(f"[catalog] Book {book.id} updated ({', '.join(sorted(changes))})")
        return book

    @staticmethod
    def delete_book(book_id: int):
        book = BookService.get_book(book_id)
        history = len(book.borrow_records)

        BookRepo.delete(book)
        BookService._commit("deleting book")
        current_app.logger.info(f"[catalog] Book {book_id} deleted with {history} borrow record(s)")

    @staticmethod
    def _commit(action: str, duplicate_code: str | None = None):
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if duplicate_code:
                raise ConflictError("ISBN already exists", code=duplicate_code)
            raise StoreError(f"Internal server error while {action}")
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"[catalog] Store failure while {action}: {e}")
            raise StoreError(f"Internal server error while {action}")
