from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from library_app.models.user import Role
from library_app.services.auth_service import AuthService
from library_app.services.circulation_service import CirculationService
from library_app.utils.decorators import role_required

# /api/books/<id>/borrow ve /return; books blueprint ile aynı prefix
borrow_bp = Blueprint("borrow", __name__)


@borrow_bp.post("/<int:book_id>/borrow")
@jwt_required()
@role_required(Role.MEMBER, Role.ADMIN)
def borrow_book(book_id: int):
    user_id, _role = AuthService.current_identity()
    record = CirculationService.borrow(book_id, user_id)
    return jsonify({
        "success": True,
        "message": "Book borrowed successfully",
        "borrowRecord": record.to_dict(include_book=True),
    }), 201


@borrow_bp.post("/<int:book_id>/return")
@jwt_required()
@role_required(Role.MEMBER, Role.ADMIN)
def return_book(book_id: int):
    user_id, _role = AuthService.current_identity()
    record = CirculationService.return_book(book_id, user_id)
    return jsonify({
        "success": True,
        "message": "Book returned successfully",
        "borrowRecord": record.to_dict(include_book=True),
    })
