from flask import Blueprint, jsonify, request

from library_backend.errors import LibraryError
from library_backend.services.book_service import BookService
from library_backend.utils.decorators import staff_required
from library_backend.utils.serializers import book_to_dict

book_bp = Blueprint("books", __name__)


@book_bp.get("")
def list_books():
    books = BookService.list_books()
    return jsonify({"success": True, "data": [book_to_dict(b) for b in books]})


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    try:
        b = BookService.get_book(book_id)
        return jsonify({"success": True, "data": book_to_dict(b)})
    except LibraryError as e:
        return jsonify({"success": False, "error": e.message}), e.status_code


@book_bp.post("")
@staff_required
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.create_book(data)
        return jsonify({"success": True, "id": b.id, "data": book_to_dict(b)}), 201
    except LibraryError as e:
        return jsonify({"success": False, "error": e.message}), e.status_code
    except (TypeError, ValueError):
        return jsonify({"success": False, "error": "quantity must be an integer"}), 400


@book_bp.put("/<int:book_id>")
@staff_required
def update_book(book_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.update_book(book_id, data)
        return jsonify({"success": True, "data": book_to_dict(b)})
    except LibraryError as e:
        return jsonify({"success": False, "error": e.message}), e.status_code


@book_bp.delete("/<int:book_id>")
@staff_required
def delete_book(book_id: int):
    try:
        BookService.delete_book(book_id)
        return jsonify({"success": True})
    except LibraryError as e:
        return jsonify({"success": False, "error": e.message}), e.status_code
