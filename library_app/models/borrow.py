from sqlalchemy import text

from library_app.extensions import db
from library_app.utils.clock import utcnow


class BorrowStatus:
    BORROWED = "BORROWED"
    RETURNED = "RETURNED"

    ALL = (BORROWED, RETURNED)


class BorrowRecord(db.Model):
    __tablename__ = "borrow_records"
    __table_args__ = (
        # a book has at most one open record; the store enforces it too
        db.Index(
            "uq_borrow_records_open_book",
            "book_id",
            unique=True,
            sqlite_where=text("status = 'BORROWED'"),
            postgresql_where=text("status = 'BORROWED'"),
        ),
        db.CheckConstraint(
            "(status = 'BORROWED' AND returned_at IS NULL)"
            " OR (status = 'RETURNED' AND returned_at IS NOT NULL)",
            name="ck_borrow_records_status_returned_at",
        ),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    returned_at = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BorrowStatus.BORROWED, index=True)

    user = db.relationship("User", back_populates="borrow_records")
    book = db.relationship("Book", back_populates="borrow_records")

    def to_dict(self, include_book: bool = False, include_user: bool = False):
        data = {
            "id": self.id,
            "userId": self.user_id,
            "bookId": self.book_id,
            "borrowDate": self.borrowed_at.isoformat() if self.borrowed_at else None,
            "returnDate": self.returned_at.isoformat() if self.returned_at else None,
            "status": self.status,
        }
        if include_book and self.book:
            data["book"] = {"id": self.book.id, "title": self.book.title, "author": self.book.author}
        if include_user and self.user:
            data["user"] = {"username": self.user.username, "email": self.user.email}
        return data
