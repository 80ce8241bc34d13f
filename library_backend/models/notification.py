import enum

from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class NotificationType(enum.Enum):
    RESERVATION_AVAILABLE = "ReservationAvailable"
    RETURN_REMINDER = "ReturnReminder"
    OVERDUE_NOTICE = "OverdueNotice"
    CUSTOM = "Custom"


class Notification(db.Model):
    """In-app inbox entry; what the user sees without e-mail."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False, default=NotificationType.CUSTOM.value)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.String(1000), nullable=False)

    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
