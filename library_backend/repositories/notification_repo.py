from library_backend.extensions import db
from library_backend.models.notification import Notification
from library_backend.models.notification_log import NotificationLog


class NotificationRepo:
    @staticmethod
    def already_sent(loan_id: int, notif_type: str) -> bool:
        return NotificationLog.query.filter_by(loan_id=loan_id, type=notif_type).first() is not None

    @staticmethod
    def add(notification: Notification):
        db.session.add(notification)
        return notification

    @staticmethod
    def list_for_user(user_id: int):
        return (
            Notification.query
            .filter_by(user_id=user_id)
            .order_by(Notification.timestamp.desc(), Notification.id.desc())
            .all()
        )

    @staticmethod
    def log(entry: NotificationLog):
        db.session.add(entry)
        db.session.commit()
        return entry
