from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from library_backend.errors import ConflictError, ForbiddenError, NotFoundError, PolicyViolation
from library_backend.extensions import db
from library_backend.models.notification import NotificationType
from library_backend.models.reservation import ALLOWED_TRANSITIONS, Reservation, ReservationStatus
from library_backend.models.stock import Stock
from library_backend.models.user import UserRoles
from library_backend.repositories.reservation_repo import ReservationRepo
from library_backend.repositories.stock_repo import StockRepo
from library_backend.services.audit_service import AuditTrail
from library_backend.services.notification_service import NotificationService
from library_backend.services.stock_service import StockService
from library_backend.utils.timeutil import utcnow


class ReservationService:
    @staticmethod
    def list_reservations():
        return ReservationRepo.list_all()

    @staticmethod
    def list_for_user(user_id: int):
        return ReservationRepo.list_open_by_user(user_id)

    @staticmethod
    def get_pending_for_book(book_id: int):
        return ReservationRepo.list_pending_for_book(book_id)

    @staticmethod
    def get_reservation(reservation_id: int) -> Reservation:
        reservation = ReservationRepo.get(reservation_id)
        if not reservation:
            raise NotFoundError("Reservation not found.")
        return reservation

    @staticmethod
    def create_reservation(user_id: int, book_id: int, requesting_user_id: int) -> Reservation:
        # users reserve for themselves only
        if user_id != requesting_user_id:
            raise ForbiddenError("User mismatch.")

        if ReservationRepo.has_pending(user_id, book_id):
            raise ConflictError("A pending reservation already exists for this book.")

        # a stock row must exist, even at zero quantity
        if StockRepo.get_by_book(book_id) is None:
            raise PolicyViolation("No stock configured for book.")

        now = utcnow()
        reservation = Reservation(
            user_id=user_id,
            book_id=book_id,
            reservation_date=now,
            created_at=now,
            status=ReservationStatus.PENDING,
        )
        try:
            ReservationRepo.add(reservation)
            ReservationRepo.commit()
        except IntegrityError:
            # lost a race against an identical request
            db.session.rollback()
            raise ConflictError("A pending reservation already exists for this book.")

        current_app.logger.info(
            f"[reservations] created id={reservation.id} user={user_id} book={book_id}"
        )
        AuditTrail.record(
            user_id,
            "Reservation",
            "CreateReservation",
            details=f"ReservationId={reservation.id}, BookId={book_id}",
            reservation_id=reservation.id,
        )
        return reservation

    @staticmethod
    def _hold_copy(reservation: Reservation, stock: Stock) -> bool:
        """
        Takes one unit of ``stock`` and sets it aside for ``reservation``.
        Does not commit; False when no unit is left.
        """
        if not StockService.try_decrease(stock):
            return False

        now = utcnow()
        reservation.status = ReservationStatus.AVAILABLE
        reservation.assigned_stock_id = stock.id
        reservation.available_at = now
        reservation.expiration_date = now + timedelta(hours=current_app.config["RESERVATION_HOLD_HOURS"])
        return True

    @staticmethod
    def _notify_available(reservation: Reservation, stock: Stock) -> None:
        title = stock.book.title if stock.book else f"Book #{stock.book_id}"
        NotificationService.notify_safely(
            reservation.user_id,
            f"The book '{title}' is now available.",
            notif_type=NotificationType.RESERVATION_AVAILABLE,
            title="Library: reserved book available",
        )

    @staticmethod
    def promote_next(stock: Stock) -> bool:
        """
        Hands a freed unit of ``stock`` to the oldest pending reservation for
        the book. The unit is held for that reserver until the reservation
        is completed, cancelled or expires.
        """
        nxt = ReservationRepo.oldest_pending_for_book(stock.book_id)
        if nxt is None:
            return False

        if not ReservationService._hold_copy(nxt, stock):
            db.session.rollback()
            return False
        ReservationRepo.commit()

        current_app.logger.info(
            f"[reservations] id={nxt.id} available for user={nxt.user_id} book={stock.book_id}"
        )
        AuditTrail.record(
            nxt.user_id,
            "ReservationAvailable",
            "PromoteReservation",
            details=f"ReservationId={nxt.id}, StockId={stock.id}",
            reservation_id=nxt.id,
        )
        ReservationService._notify_available(nxt, stock)
        return True

    @staticmethod
    def release_hold(assigned_stock_id: int = None) -> None:
        """Gives a held unit back to stock and serves the queue with it."""
        if assigned_stock_id is None:
            return
        stock = StockRepo.get(assigned_stock_id)
        if stock is None:
            return
        StockService.increase(stock)
        ReservationService.promote_next(stock)

    @staticmethod
    def _transition(reservation: Reservation, new_status: ReservationStatus) -> None:
        if new_status == reservation.status:
            return
        if new_status not in ALLOWED_TRANSITIONS[reservation.status]:
            raise PolicyViolation(
                f"Cannot change reservation status from {reservation.status.value} to {new_status.value}."
            )
        if new_status == ReservationStatus.COMPLETED:
            raise PolicyViolation("A reservation is completed by lending the held copy.")

        if new_status == ReservationStatus.AVAILABLE:
            stock = StockRepo.get_by_book(reservation.book_id)
            if stock is None or not ReservationService._hold_copy(reservation, stock):
                db.session.rollback()
                raise PolicyViolation("Book unavailable.")
            return

        reservation.status = new_status

    @staticmethod
    def update_reservation(reservation_id: int, data: dict) -> Reservation:
        reservation = ReservationService.get_reservation(reservation_id)
        previous = reservation.status
        held_stock_id = reservation.assigned_stock_id

        if data.get("status") is not None:
            try:
                new_status = ReservationStatus(data["status"])
            except ValueError:
                raise PolicyViolation(f"Unknown reservation status: {data['status']}")
            ReservationService._transition(reservation, new_status)

        if "reservationDate" in data and data["reservationDate"]:
            try:
                reservation.reservation_date = datetime.fromisoformat(data["reservationDate"])
            except (TypeError, ValueError):
                db.session.rollback()
                raise PolicyViolation("reservationDate must be an ISO-8601 date.")

        try:
            ReservationRepo.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("A pending reservation already exists for this book.")

        if previous == ReservationStatus.AVAILABLE and reservation.status == ReservationStatus.CANCELLED:
            ReservationService.release_hold(held_stock_id)
        elif previous == ReservationStatus.PENDING and reservation.status == ReservationStatus.AVAILABLE:
            ReservationService._notify_available(reservation, StockRepo.get(reservation.assigned_stock_id))

        AuditTrail.record(
            reservation.user_id,
            "Update",
            "UpdateReservation",
            details=f"ReservationId={reservation.id}, Status={reservation.status.value}",
            reservation_id=reservation.id,
        )
        return reservation

    @staticmethod
    def delete_reservation(reservation_id: int, requesting_user_id: int, role: str = None) -> None:
        reservation = ReservationService.get_reservation(reservation_id)

        if reservation.user_id != requesting_user_id and role not in UserRoles.STAFF:
            raise ForbiddenError("Only the owner or library staff may delete this reservation.")

        held = reservation.status == ReservationStatus.AVAILABLE
        owner_id = reservation.user_id
        assigned_stock_id = reservation.assigned_stock_id
        ReservationRepo.delete(reservation)
        ReservationRepo.commit()

        if held:
            ReservationService.release_hold(assigned_stock_id)

        AuditTrail.record(
            owner_id,
            "Delete",
            "DeleteReservation",
            details=f"ReservationId={reservation_id}",
            reservation_id=reservation_id,
        )

    @staticmethod
    def cleanup_expired(now: datetime = None) -> int:
        """Cancels Available reservations whose hold window has passed."""
        now = now or utcnow()
        expired = ReservationRepo.find_expired_available(now)

        for reservation in expired:
            reservation.status = ReservationStatus.CANCELLED
            ReservationRepo.commit()
            ReservationService.release_hold(reservation.assigned_stock_id)
            AuditTrail.record(
                reservation.user_id,
                "ReservationExpired",
                "ExpireReservation",
                details=f"ReservationId={reservation.id}",
                reservation_id=reservation.id,
            )

        if expired:
            current_app.logger.info(f"[reservations] expired={len(expired)}")
        return len(expired)
