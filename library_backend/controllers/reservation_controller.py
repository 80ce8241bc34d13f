from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_backend.errors import LibraryError
from library_backend.models.user import UserRoles
from library_backend.services.reservation_service import ReservationService
from library_backend.utils.decorators import current_identity, is_staff, role_required, staff_required
from library_backend.utils.serializers import reservation_to_dict

reservation_bp = Blueprint("reservations", __name__)


def _error(e: LibraryError):
    return jsonify({"success": False, "error": e.message}), e.status_code


def _forbidden():
    return jsonify({"success": False, "error": "Forbidden"}), 403


@reservation_bp.get("")
@staff_required
def list_reservations():
    items = ReservationService.list_reservations()
    return jsonify({"success": True, "data": [reservation_to_dict(r) for r in items]})


@reservation_bp.get("/user/<int:user_id>")
@jwt_required()
def list_for_user(user_id: int):
    me, role = current_identity()
    if user_id != me and not is_staff(role):
        return _forbidden()
    items = ReservationService.list_for_user(user_id)
    return jsonify({"success": True, "data": [reservation_to_dict(r) for r in items]})


@reservation_bp.get("/book/<int:book_id>/pending")
@staff_required
def pending_for_book(book_id: int):
    items = ReservationService.get_pending_for_book(book_id)
    return jsonify({"success": True, "data": [reservation_to_dict(r) for r in items]})


@reservation_bp.get("/<int:reservation_id>")
@jwt_required()
def get_reservation(reservation_id: int):
    me, role = current_identity()
    try:
        r = ReservationService.get_reservation(reservation_id)
    except LibraryError as e:
        return _error(e)

    if r.user_id != me and not is_staff(role):
        return _forbidden()
    return jsonify({"success": True, "data": reservation_to_dict(r)})


@reservation_bp.post("")
@role_required(UserRoles.USER)
def create_reservation():
    me, _role = current_identity()
    data = request.get_json(silent=True) or {}
    try:
        user_id = int(data["userId"])
        book_id = int(data["bookId"])
    except (KeyError, TypeError, ValueError):
        return jsonify({"success": False, "error": "userId and bookId are required"}), 400

    try:
        r = ReservationService.create_reservation(user_id, book_id, requesting_user_id=me)
    except LibraryError as e:
        return _error(e)
    return jsonify({"success": True, "data": reservation_to_dict(r)}), 201


@reservation_bp.put("/<int:reservation_id>")
@staff_required
def update_reservation(reservation_id: int):
    data = request.get_json(silent=True) or {}
    try:
        r = ReservationService.update_reservation(reservation_id, data)
    except LibraryError as e:
        return _error(e)
    return jsonify({"success": True, "data": reservation_to_dict(r)})


@reservation_bp.delete("/<int:reservation_id>")
@jwt_required()
def delete_reservation(reservation_id: int):
    me, role = current_identity()
    try:
        ReservationService.delete_reservation(reservation_id, requesting_user_id=me, role=role)
    except LibraryError as e:
        return _error(e)
    return jsonify({"success": True})


@reservation_bp.post("/cleanup-expired")
@staff_required
def cleanup_expired():
    count = ReservationService.cleanup_expired()
    return jsonify({"success": True, "count": count, "message": f"{count} expired reservations cancelled."})
