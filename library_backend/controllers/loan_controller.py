from datetime import datetime

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_backend.errors import LibraryError
from library_backend.services.loan_service import LoanService
from library_backend.utils.decorators import current_identity, is_staff, staff_required
from library_backend.utils.serializers import loan_to_dict

loan_bp = Blueprint("loans", __name__)


# loan endpoints report every failure as 400 {error}
def _bad_request(message):
    return jsonify({"success": False, "error": message}), 400


@loan_bp.post("")
@staff_required
def create_loan():
    data = request.get_json(silent=True) or {}
    try:
        user_id = int(data["userId"])
        book_id = int(data["bookId"])
    except (KeyError, TypeError, ValueError):
        return _bad_request("Invalid payload.")

    try:
        loan = LoanService.create_loan(user_id, book_id)
    except LibraryError as e:
        return _bad_request(e.message)

    return jsonify({
        "success": True,
        "message": "Loan created successfully.",
        "loanId": loan.id,
        "dueDate": loan.due_date.isoformat(),
    })


@loan_bp.put("/<int:loan_id>/return")
@staff_required
def return_loan(loan_id: int):
    try:
        loan, notified = LoanService.return_loan(loan_id)
    except LibraryError as e:
        return _bad_request(e.message)

    return jsonify({
        "success": True,
        "message": "Book returned successfully.",
        "reservationNotified": notified,
        "fine": float(loan.fine),
    })


@loan_bp.get("")
@jwt_required()
def list_loans():
    user_id, role = current_identity()
    loans = LoanService.list_loans() if is_staff(role) else LoanService.list_loans_for_user(user_id)
    return jsonify({"success": True, "data": [loan_to_dict(x) for x in loans]})


@loan_bp.get("/<int:loan_id>")
@jwt_required()
def get_loan(loan_id: int):
    user_id, role = current_identity()
    try:
        loan = LoanService.get_loan(loan_id)
    except LibraryError as e:
        return _bad_request(e.message)

    if loan.user_id != user_id and not is_staff(role):
        return jsonify({"success": False, "error": "Forbidden"}), 403
    return jsonify({"success": True, "data": loan_to_dict(loan)})


@loan_bp.put("/<int:loan_id>")
@staff_required
def update_loan(loan_id: int):
    data = request.get_json(silent=True) or {}
    try:
        due_date = datetime.fromisoformat(data["dueDate"])
    except (KeyError, TypeError, ValueError):
        return _bad_request("Invalid payload.")
    if due_date.tzinfo is not None:
        due_date = due_date.replace(tzinfo=None) - due_date.utcoffset()

    try:
        loan = LoanService.update_loan(loan_id, due_date)
    except LibraryError as e:
        return _bad_request(e.message)
    return jsonify({"success": True, "data": loan_to_dict(loan)})


@loan_bp.delete("/<int:loan_id>")
@staff_required
def delete_loan(loan_id: int):
    try:
        LoanService.delete_loan(loan_id)
    except LibraryError as e:
        return _bad_request(e.message)
    return jsonify({"success": True, "message": "Loan deleted successfully."})
