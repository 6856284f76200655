from sqlalchemy import func, update

from library_app.extensions import db
from library_app.models.borrow import BorrowRecord, BorrowStatus


class BorrowRepo:
    @staticmethod
    def get(record_id: int):
        return db.session.get(BorrowRecord, record_id)

    @staticmethod
    def _paginate(query, page: int, limit: int):
        total = query.count()
        items = query.order_by(BorrowRecord.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return items, total

    @staticmethod
    def list_by_user(user_id: int, status=None, page: int = 1, limit: int = 10):
        query = BorrowRecord.query.filter_by(user_id=user_id)
        if status:
            query = query.filter_by(status=status)
        return BorrowRepo._paginate(query, page, limit)

    @staticmethod
    def list_all(status=None, page: int = 1, limit: int = 10):
        query = BorrowRecord.query
        if status:
            query = query.filter_by(status=status)
        return BorrowRepo._paginate(query, page, limit)

    @staticmethod
    def find_open(user_id: int, book_id: int):
        return BorrowRecord.query.filter_by(
            user_id=user_id, book_id=book_id, status=BorrowStatus.BORROWED
        ).first()

    @staticmethod
    def find_open_for_book(book_id: int):
        return BorrowRecord.query.filter_by(book_id=book_id, status=BorrowStatus.BORROWED).first()

    @staticmethod
    def count_open_by_book() -> dict:
        rows = (
            db.session.query(BorrowRecord.book_id, func.count(BorrowRecord.id))
            .filter(BorrowRecord.status == BorrowStatus.BORROWED)
            .group_by(BorrowRecord.book_id)
            .all()
        )
        return {book_id: count for book_id, count in rows}

    @staticmethod
    def count(status=None) -> int:
        query = BorrowRecord.query
        if status:
            query = query.filter_by(status=status)
        return query.count()

    @staticmethod
    def create(record: BorrowRecord):
        db.session.add(record)
        db.session.flush()
        return record

    @staticmethod
    def mark_returned(record_id: int, now) -> bool:
        # sadece hala BORROWED ise; eşzamanlı ikinci iade 0 satır görür
        result = db.session.execute(
            update(BorrowRecord)
            .where(BorrowRecord.id == record_id, BorrowRecord.status == BorrowStatus.BORROWED)
            .values(status=BorrowStatus.RETURNED, returned_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
