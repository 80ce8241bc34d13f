from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from library_backend.models.user import UserRoles
from library_backend.services.notification_service import NotificationService
from library_backend.utils.decorators import current_identity, role_required
from library_backend.utils.serializers import notification_to_dict

notif_bp = Blueprint("notifications", __name__)


@notif_bp.get("/my")
@jwt_required()
def my_notifications():
    user_id, _role = current_identity()
    rows = NotificationService.list_for_user(user_id)
    return jsonify({"success": True, "data": [notification_to_dict(n) for n in rows]})


@notif_bp.post("/run-reminders")
@role_required(UserRoles.ADMIN)
def run_reminders():
    reminders = NotificationService.send_return_reminders()
    overdue = NotificationService.send_overdue_notices()
    return jsonify({
        "success": True,
        "message": "Reminder check finished.",
        "reminders": reminders,
        "overdue": overdue,
    })
