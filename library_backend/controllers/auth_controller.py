from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt, jwt_required

from library_backend.errors import LibraryError
from library_backend.repositories.user_repo import UserRepo
from library_backend.services.auth_service import AuthService
from library_backend.utils.decorators import current_identity

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()

    if not username or not email or not password:
        return jsonify({"success": False, "error": "username, email and password are required"}), 400

    try:
        user = AuthService.register(
            username=username,
            email=email,
            password=password,
        )  # role is never taken from the request
        return jsonify({"success": True, "id": user.id, "username": user.username, "role": user.role}), 201
    except LibraryError as e:
        return jsonify({"success": False, "error": e.message}), e.status_code


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(
            (data.get("username") or "").strip(),
            (data.get("password") or "").strip()
        )
        return jsonify({
            "success": True,
            "access_token": token,
            "user": {"id": user.id, "username": user.username, "role": user.role}
        })
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 401


@auth_bp.get("/me")
@jwt_required()
def me():
    user_id, _role = current_identity()
    user = UserRepo.get_by_id(user_id)
    if user is None:
        return jsonify({"success": False, "error": "User not found."}), 404

    return jsonify({
        "success": True,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": get_jwt().get("role", user.role)
        }
    })
