from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_app.repositories.borrow_repo import BorrowRepo
from library_app.schemas import BorrowQuery, parse
from library_app.services.auth_service import AuthService
from library_app.utils.pagination import pagination_meta

user_bp = Blueprint("users", __name__)


@user_bp.get("/me/borrows")
@jwt_required()
def my_borrows():
    user_id, _role = AuthService.current_identity()
    query = parse(BorrowQuery, request.args.to_dict())
    records, total = BorrowRepo.list_by_user(user_id, status=query.status, page=query.page, limit=query.limit)
    return jsonify({
        "success": True,
        "borrowRecords": [r.to_dict(include_book=True) for r in records],
        "pagination": pagination_meta(query.page, query.limit, total),
    })
