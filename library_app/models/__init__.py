from library_app.models.book import Book
from library_app.models.borrow import BorrowRecord, BorrowStatus
from library_app.models.user import Role, User

__all__ = ["Book", "BorrowRecord", "BorrowStatus", "Role", "User"]
