from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from library_app.errors import ConflictError, NotFoundError, StoreError
from library_app.extensions import db
from library_app.models.borrow import BorrowRecord, BorrowStatus
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.utils.clock import utcnow


def _not_available():
    return ConflictError("Book is currently not available", code="BOOK_NOT_AVAILABLE")


def _no_active_borrow():
    return NotFoundError("No active borrow record found for this book", code="BORROW_RECORD_NOT_FOUND")


class CirculationService:
    """
    The only writer of Book.available and BorrowRecord.status.

    Both transitions run as one transaction. The availability flip and the
    record close are conditional UPDATEs, so when two requests race on the
    same row exactly one of them sees rowcount == 1.
    """

    @staticmethod
    def borrow(book_id: int, user_id: int) -> BorrowRecord:
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found", code="BOOK_NOT_FOUND")

        if BorrowRepo.find_open(user_id, book_id):
            raise ConflictError("You have already borrowed this book", code="ALREADY_BORROWED")

        if not book.available:
            raise _not_available()

        now = utcnow()
        try:
            if not BookRepo.conditional_set_availability(book_id, expected=True, new=False, now=now):
                db.session.rollback()
                current_app.logger.warning(f"[circulation] Borrow race lost: book={book_id} user={user_id}")
                raise _not_available()

            record = BorrowRepo.create(
                BorrowRecord(user_id=user_id, book_id=book_id, borrowed_at=now, status=BorrowStatus.BORROWED)
            )
            db.session.commit()
        except IntegrityError:
            # uq_borrow_records_open_book: başka bir açık kayıt zaten var
            db.session.rollback()
            current_app.logger.warning(f"[circulation] Open-record index rejected borrow: book={book_id}")
            raise _not_available()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"[circulation] Borrow failed, rolled back: book={book_id} err={e}")
            raise StoreError("Internal server error while borrowing book", code="BORROW_BOOK_ERROR")

        current_app.logger.info(f"[circulation] Book {book_id} borrowed by user {user_id} (record {record.id})")
        return record

    @staticmethod
    def return_book(book_id: int, user_id: int) -> BorrowRecord:
        record = BorrowRepo.find_open(user_id, book_id)
        if not record:
            raise _no_active_borrow()

        now = utcnow()
        try:
            if not BorrowRepo.mark_returned(record.id, now):
                db.session.rollback()
                current_app.logger.warning(f"[circulation] Return race lost: record={record.id}")
                raise _no_active_borrow()

            if not BookRepo.conditional_set_availability(book_id, expected=False, new=True, now=now):
                current_app.logger.warning(
                    f"[circulation] Book {book_id} was already available when record {record.id} closed"
                )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(f"[circulation] Return failed, rolled back: book={book_id} err={e}")
            raise StoreError("Internal server error while returning book", code="RETURN_BOOK_ERROR")

        current_app.logger.info(f"[circulation] Book {book_id} returned by user {user_id} (record {record.id})")
        # commit sonrası expire edildi, güncel satır yeniden okunur
        return record

    @staticmethod
    def check_consistency() -> dict:
        """
        Compare every book's availability flag with its open borrow records.
        Read-only; it reports disagreements and never repairs them.
        """
        open_counts = BorrowRepo.count_open_by_book()
        books = BookRepo.list_all()

        issues = []
        for book in books:
            open_count = open_counts.get(book.id, 0)
            if book.available and open_count:
                issues.append({"bookId": book.id, "problem": "AVAILABLE_WITH_OPEN_BORROW", "openBorrows": open_count})
            elif not book.available and open_count == 0:
                issues.append({"bookId": book.id, "problem": "UNAVAILABLE_WITHOUT_BORROW", "openBorrows": 0})
            if open_count > 1:
                issues.append({"bookId": book.id, "problem": "MULTIPLE_OPEN_BORROWS", "openBorrows": open_count})

        if issues:
            current_app.logger.warning(f"[circulation] Consistency check found {len(issues)} issue(s)")

        return {"consistent": not issues, "checkedBooks": len(books), "issues": issues}
