from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class NotificationLog(db.Model):
    __tablename__ = "notification_logs"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, nullable=True, index=True)
    loan_id = db.Column(db.Integer, nullable=True, index=True)

    # ReservationAvailable, ReturnReminder, OverdueNotice, Custom
    type = db.Column(db.String(50), nullable=False, default="Custom")

    email = db.Column(db.String(255), nullable=True)
    message = db.Column(db.String(1000), nullable=True)

    sent_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    success = db.Column(db.Boolean, nullable=False, default=True)
    error_message = db.Column(db.String(500), nullable=True)
