from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_app.models.borrow import BorrowStatus
from library_app.models.user import Role
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.repositories.user_repo import UserRepo
from library_app.schemas import BorrowQuery, parse
from library_app.services.circulation_service import CirculationService
from library_app.utils.decorators import role_required
from library_app.utils.pagination import pagination_meta

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/users")
@jwt_required()
@role_required(Role.ADMIN)
def list_users():
    users = UserRepo.list_all()
    open_counts = {}
    for user in users:
        open_counts[user.id] = sum(1 for r in user.borrow_records if r.status == BorrowStatus.BORROWED)
    return jsonify({"success": True, "users": [
        {**u.to_dict(), "activeBorrows": open_counts[u.id]} for u in users
    ]})


@admin_bp.get("/borrows")
@jwt_required()
@role_required(Role.ADMIN)
def list_borrows():
    query = parse(BorrowQuery, request.args.to_dict())
    records, total = BorrowRepo.list_all(status=query.status, page=query.page, limit=query.limit)
    return jsonify({
        "success": True,
        "borrowRecords": [r.to_dict(include_book=True, include_user=True) for r in records],
        "pagination": pagination_meta(query.page, query.limit, total),
    })


@admin_bp.get("/stats")
@jwt_required()
@role_required(Role.ADMIN)
def stats():
    return jsonify({"success": True, "stats": {
        "totalBooks": BookRepo.count(),
        "availableBooks": BookRepo.count(available=True),
        "borrowedBooks": BookRepo.count(available=False),
        "totalUsers": UserRepo.count(),
        "activeBorrows": BorrowRepo.count(status=BorrowStatus.BORROWED),
    }})


@admin_bp.get("/consistency")
@jwt_required()
@role_required(Role.ADMIN)
def consistency():
    report = CirculationService.check_consistency()
    return jsonify({"success": True, **report})
