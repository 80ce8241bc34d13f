from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_backend.errors import LibraryError
from library_backend.services.stock_service import StockService
from library_backend.utils.decorators import staff_required
from library_backend.utils.serializers import stock_to_dict

stock_bp = Blueprint("stocks", __name__)


def _error(e: LibraryError):
    return jsonify({"success": False, "error": e.message}), e.status_code


def _int_field(data: dict, name: str) -> int:
    try:
        return int(data[name])
    except KeyError:
        raise LibraryError(f"{name} is required")
    except (TypeError, ValueError):
        raise LibraryError(f"{name} must be an integer")


@stock_bp.get("")
@jwt_required()
def list_stocks():
    return jsonify({"success": True, "data": [stock_to_dict(s) for s in StockService.list_stocks()]})


@stock_bp.get("/<int:stock_id>")
@jwt_required()
def get_stock(stock_id: int):
    try:
        return jsonify({"success": True, "data": stock_to_dict(StockService.get_stock(stock_id))})
    except LibraryError as e:
        return _error(e)


@stock_bp.post("")
@staff_required
def create_stock():
    data = request.get_json(silent=True) or {}
    try:
        book_id = _int_field(data, "bookId")
        quantity = _int_field(data, "quantity") if "quantity" in data else 0
        s = StockService.create_stock(book_id, quantity)
        return jsonify({"success": True, "data": stock_to_dict(s)}), 201
    except LibraryError as e:
        return _error(e)


@stock_bp.put("/<int:stock_id>")
@staff_required
def update_stock(stock_id: int):
    data = request.get_json(silent=True) or {}
    try:
        s = StockService.set_quantity(stock_id, _int_field(data, "quantity"))
        return jsonify({"success": True, "data": stock_to_dict(s)})
    except LibraryError as e:
        return _error(e)


@stock_bp.patch("/<int:stock_id>/adjust")
@staff_required
def adjust_stock(stock_id: int):
    data = request.get_json(silent=True) or {}
    try:
        s = StockService.adjust(stock_id, _int_field(data, "adjustment"))
        return jsonify({
            "success": True,
            "message": "Stock updated successfully.",
            "data": stock_to_dict(s),
        })
    except LibraryError as e:
        return _error(e)


@stock_bp.delete("/<int:stock_id>")
@staff_required
def delete_stock(stock_id: int):
    try:
        StockService.delete_stock(stock_id)
        return jsonify({"success": True})
    except LibraryError as e:
        return _error(e)
