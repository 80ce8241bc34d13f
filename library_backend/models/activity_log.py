from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    details = db.Column(db.String(1000), nullable=True)

    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
