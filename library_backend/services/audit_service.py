from flask import current_app

from library_backend.extensions import db
from library_backend.services.activity_log_service import ActivityLogService
from library_backend.services.history_service import HistoryService


class AuditTrail:
    @staticmethod
    def record(
        user_id: int,
        event_type: str,
        action: str,
        details: str = None,
        loan_id: int = None,
        reservation_id: int = None,
    ) -> bool:
        """
        Appends a history event and an activity-log entry.
        Best-effort: a failure is logged and rolled back, never raised.
        """
        try:
            HistoryService.log_event(user_id, event_type, loan_id=loan_id, reservation_id=reservation_id)
            ActivityLogService.log(user_id, action, details)
            return True
        except Exception as e:
            db.session.rollback()
            current_app.logger.warning(f"[audit] {action} for user={user_id} not recorded: {e}")
            return False
