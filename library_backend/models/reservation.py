import enum

from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class ReservationStatus(enum.Enum):
    PENDING = "Pending"
    AVAILABLE = "Available"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Pending -> Available -> Completed, Pending/Available -> Cancelled
ALLOWED_TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.AVAILABLE, ReservationStatus.CANCELLED},
    ReservationStatus.AVAILABLE: {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED},
    ReservationStatus.COMPLETED: set(),
    ReservationStatus.CANCELLED: set(),
}


class Reservation(db.Model):
    __tablename__ = "reservations"
    __table_args__ = (
        # at most one pending reservation per (user, book)
        db.Index(
            "uq_reservations_pending_user_book",
            "user_id",
            "book_id",
            unique=True,
            sqlite_where=db.text("status = 'Pending'"),
            postgresql_where=db.text("status = 'Pending'"),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)

    reservation_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    status = db.Column(
        db.Enum(
            ReservationStatus,
            name="reservation_status",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=ReservationStatus.PENDING,
    )

    available_at = db.Column(db.DateTime, nullable=True)
    expiration_date = db.Column(db.DateTime, nullable=True)
    assigned_stock_id = db.Column(db.Integer, db.ForeignKey("stocks.id", ondelete="SET NULL"), nullable=True)

    user = db.relationship("User", backref="reservations")
    book = db.relationship("Book", backref="reservations")
