from sqlalchemy import or_, update

from library_app.extensions import db
from library_app.models.book import Book


class BookRepo:
    @staticmethod
    def list_all():
        return Book.query.order_by(Book.id.asc()).all()

    @staticmethod
    def list_filtered(search=None, search_by="both", available=None, page=1, limit=10):
        query = Book.query

        if available is not None:
            query = query.filter(Book.available == available)

        if search:
            pattern = f"%{search}%"
            conditions = []
            if search_by in ("title", "both"):
                conditions.append(Book.title.ilike(pattern))
            if search_by in ("author", "both"):
                conditions.append(Book.author.ilike(pattern))
            query = query.filter(or_(*conditions))

        total = query.count()
        books = (
            query.order_by(Book.created_at.desc(), Book.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return books, total

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_by_isbn(isbn: str):
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def count(available=None) -> int:
        query = Book.query
        if available is not None:
            query = query.filter(Book.available == available)
        return query.count()

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def update(book: Book, changes: dict, now):
        # available burada yazılmaz, sadece CirculationService değiştirir
        for key in ("title", "author", "isbn"):
            if key in changes:
                setattr(book, key, changes[key])
        book.updated_at = now
        db.session.flush()
        return book

    @staticmethod
    def conditional_set_availability(book_id: int, expected: bool, new: bool, now) -> bool:
        """
        UPDATE books SET available=:new WHERE id=:id AND available=:expected
        True only if this statement changed the row; caller owns the transaction.
        """
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available == expected)
            .values(available=new, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
        db.session.flush()
