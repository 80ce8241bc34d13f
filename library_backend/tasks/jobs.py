from flask import current_app

from library_backend.extensions import db
from library_backend.services.notification_service import NotificationService
from library_backend.services.reservation_service import ReservationService
from library_backend.utils.timeutil import utcnow


def run_reminder_job(app):
    """
    Sends due-soon reminders and overdue notices for unreturned loans.
    Each loan gets at most one notice of each kind.
    """
    with app.app_context():
        try:
            now = utcnow()
            reminders = NotificationService.send_return_reminders(now)
            overdue = NotificationService.send_overdue_notices(now)
            current_app.logger.info(f"[reminders] due_soon_sent={reminders} overdue_sent={overdue}")
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[reminders] Error: {e}")


def run_reservation_cleanup_job(app):
    """Cancels Available reservations whose hold expired and passes the copy on."""
    with app.app_context():
        try:
            count = ReservationService.cleanup_expired(utcnow())
            current_app.logger.info(f"[reservation_cleanup] expired={count}")
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[reservation_cleanup] Error: {e}")
