from datetime import datetime

from library_backend.extensions import db
from library_backend.models.reservation import Reservation, ReservationStatus


class ReservationRepo:
    @staticmethod
    def get(reservation_id: int):
        return db.session.get(Reservation, reservation_id)

    @staticmethod
    def list_all():
        return Reservation.query.order_by(Reservation.id.desc()).all()

    @staticmethod
    def list_open_by_user(user_id: int):
        return (
            Reservation.query
            .filter(
                Reservation.user_id == user_id,
                Reservation.status.in_([ReservationStatus.PENDING, ReservationStatus.AVAILABLE]),
            )
            .order_by(Reservation.created_at)
            .all()
        )

    @staticmethod
    def has_pending(user_id: int, book_id: int) -> bool:
        return Reservation.query.filter_by(
            user_id=user_id, book_id=book_id, status=ReservationStatus.PENDING
        ).first() is not None

    @staticmethod
    def list_held_for(user_id: int, book_id: int):
        # Available reservations that actually hold a unit of stock
        return (
            Reservation.query
            .filter(
                Reservation.user_id == user_id,
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.AVAILABLE,
                Reservation.assigned_stock_id.isnot(None),
            )
            .order_by(Reservation.available_at.asc(), Reservation.id.asc())
            .all()
        )

    @staticmethod
    def _pending_for_book_query(book_id: int):
        # oldest first; id breaks ties between identical timestamps
        return (
            Reservation.query
            .filter_by(book_id=book_id, status=ReservationStatus.PENDING)
            .order_by(Reservation.created_at.asc(), Reservation.id.asc())
        )

    @staticmethod
    def list_pending_for_book(book_id: int):
        return ReservationRepo._pending_for_book_query(book_id).all()

    @staticmethod
    def oldest_pending_for_book(book_id: int):
        return ReservationRepo._pending_for_book_query(book_id).first()

    @staticmethod
    def find_expired_available(now: datetime):
        return Reservation.query.filter(
            Reservation.status == ReservationStatus.AVAILABLE,
            Reservation.expiration_date.isnot(None),
            Reservation.expiration_date <= now,
        ).all()

    @staticmethod
    def add(reservation: Reservation):
        db.session.add(reservation)
        db.session.flush()
        return reservation

    @staticmethod
    def delete(reservation: Reservation):
        db.session.delete(reservation)

    @staticmethod
    def commit():
        db.session.commit()
