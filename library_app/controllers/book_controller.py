# app/controllers/book_controller.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_app.models.user import Role
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.schemas import BookIn, BookQuery, BookUpdateIn, PageQuery, parse
from library_app.services.book_service import BookService
from library_app.utils.decorators import role_required
from library_app.utils.pagination import pagination_meta

book_bp = Blueprint("books", __name__)


@book_bp.get("")
def list_books():
    query = parse(BookQuery, request.args.to_dict())
    books, total = BookService.list_books(query)
    return jsonify({
        "success": True,
        "books": [b.to_dict() for b in books],
        "pagination": pagination_meta(query.page, query.limit, total),
    })


@book_bp.get("/available")
def list_available_books():
    query = parse(PageQuery, request.args.to_dict())
    books, total = BookService.list_available(query.page, query.limit)
    return jsonify({
        "success": True,
        "books": [b.to_dict() for b in books],
        "pagination": pagination_meta(query.page, query.limit, total),
    })


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    book = BookService.get_book(book_id)
    data = book.to_dict()
    open_record = BorrowRepo.find_open_for_book(book.id)
    data["borrowRecords"] = [open_record.to_dict(include_user=True)] if open_record else []
    return jsonify({"success": True, "book": data})


@book_bp.post("")
@jwt_required()
@role_required(Role.ADMIN)
def create_book():
    data = parse(BookIn, request.get_json(silent=True))
    book = BookService.create_book(data)
    return jsonify({"success": True, "message": "Book added successfully", "book": book.to_dict()}), 201


@book_bp.put("/<int:book_id>")
@jwt_required()
@role_required(Role.ADMIN)
def update_book(book_id: int):
    data = parse(BookUpdateIn, request.get_json(silent=True))
    book = BookService.update_book(book_id, data)
    return jsonify({"success": True, "message": "Book updated successfully", "book": book.to_dict()})


@book_bp.delete("/<int:book_id>")
@jwt_required()
@role_required(Role.ADMIN)
def delete_book(book_id: int):
    BookService.delete_book(book_id)
    return jsonify({"success": True, "message": "Book deleted successfully"})
