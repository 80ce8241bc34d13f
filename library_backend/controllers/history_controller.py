from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_backend.models.user import UserRoles
from library_backend.services.activity_log_service import ActivityLogService
from library_backend.services.history_service import HistoryService
from library_backend.utils.decorators import current_identity, is_staff, role_required
from library_backend.utils.serializers import activity_to_dict, history_to_dict

history_bp = Blueprint("histories", __name__)
audit_bp = Blueprint("audits", __name__)


@history_bp.get("/user/<int:user_id>")
@jwt_required()
def user_history(user_id: int):
    me, role = current_identity()
    if user_id != me and not is_staff(role):
        return jsonify({"success": False, "error": "Forbidden"}), 403

    try:
        page = int(request.args.get("page", 1))
        page_size = int(request.args.get("pageSize", 20))
        rows = HistoryService.get_history_for_user(user_id, page, page_size)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    return jsonify({"success": True, "data": [history_to_dict(h) for h in rows]})


@audit_bp.get("/user/<int:user_id>")
@role_required(UserRoles.ADMIN)
def user_activity(user_id: int):
    rows = ActivityLogService.get_by_user(user_id)
    return jsonify({"success": True, "data": [activity_to_dict(a) for a in rows]})
