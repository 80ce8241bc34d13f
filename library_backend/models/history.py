from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class History(db.Model):
    __tablename__ = "histories"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    event_type = db.Column(db.String(50), nullable=False)

    # plain ids: the history outlives deleted loans/reservations
    loan_id = db.Column(db.Integer, nullable=True, index=True)
    reservation_id = db.Column(db.Integer, nullable=True, index=True)

    event_date = db.Column(db.DateTime, nullable=False, default=utcnow)
