from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from flask import current_app

from library_backend.errors import NotFoundError, PolicyViolation
from library_backend.extensions import db
from library_backend.models.loan import Loan
from library_backend.models.reservation import ReservationStatus
from library_backend.repositories.loan_repo import LoanRepo
from library_backend.repositories.reservation_repo import ReservationRepo
from library_backend.repositories.stock_repo import StockRepo
from library_backend.repositories.user_repo import UserRepo
from library_backend.services.audit_service import AuditTrail
from library_backend.services.reservation_service import ReservationService
from library_backend.services.stock_service import StockService
from library_backend.utils.timeutil import utcnow


@dataclass(frozen=True)
class LoanPolicy:
    max_active_loans: int
    loan_duration_days: int
    late_fee_per_day: Decimal

    @classmethod
    def from_config(cls, config=None) -> "LoanPolicy":
        config = config if config is not None else current_app.config
        return cls(
            max_active_loans=int(config["MAX_ACTIVE_LOANS"]),
            loan_duration_days=int(config["LOAN_DURATION_DAYS"]),
            late_fee_per_day=Decimal(str(config["LATE_FEE_PER_DAY"])),
        )


def compute_days_late(due_date: datetime, returned_at: datetime) -> int:
    # calendar days, so returning any time on the due day is on time
    return max(0, (returned_at.date() - due_date.date()).days)


def compute_fine(due_date: datetime, returned_at: datetime, fee_per_day: Decimal) -> Decimal:
    days_late = compute_days_late(due_date, returned_at)
    return (Decimal(fee_per_day) * days_late).quantize(Decimal("0.01"))


class LoanService:
    @staticmethod
    def list_loans():
        return LoanRepo.list_all()

    @staticmethod
    def list_loans_for_user(user_id: int):
        return LoanRepo.list_by_user(user_id)

    @staticmethod
    def list_overdue(now: datetime = None):
        return LoanRepo.find_overdue(now or utcnow())

    @staticmethod
    def get_loan(loan_id: int) -> Loan:
        loan = LoanRepo.get(loan_id)
        if not loan:
            raise NotFoundError("Loan not found.")
        return loan

    @staticmethod
    def create_loan(user_id: int, book_id: int) -> Loan:
        policy = LoanPolicy.from_config()

        user = UserRepo.get_by_id(user_id, for_update=True)
        if not user:
            raise NotFoundError("User not found.")

        active = LoanRepo.count_active_for_user(user_id)
        if active >= policy.max_active_loans:
            raise PolicyViolation(f"Maximum active loans ({policy.max_active_loans}) reached.")

        stock = StockRepo.get_by_book(book_id)
        if stock is None:
            raise PolicyViolation("Book unavailable.")

        # a copy already set aside for this user's reservation is used first;
        # any further holds on the same book go back to the queue
        holds = ReservationRepo.list_held_for(user_id, book_id)
        held, extra = (holds[0], holds[1:]) if holds else (None, [])
        released = [(r.id, r.assigned_stock_id) for r in extra]
        for r in extra:
            r.status = ReservationStatus.CANCELLED
        if held is not None:
            held.status = ReservationStatus.COMPLETED
        elif not StockService.try_decrease(stock):
            db.session.rollback()
            raise PolicyViolation("Book unavailable.")

        now = utcnow()
        loan = Loan(
            user_id=user_id,
            book_id=book_id,
            stock_id=stock.id,
            loan_date=now,
            due_date=now + timedelta(days=policy.loan_duration_days),
            fine=Decimal("0.00"),
        )
        LoanRepo.add(loan)
        LoanRepo.commit()

        current_app.logger.info(
            f"[loans] created id={loan.id} user={user_id} book={book_id} due={loan.due_date:%Y-%m-%d}"
        )
        AuditTrail.record(
            user_id,
            "Loan",
            "CreateLoan",
            details=f"LoanId={loan.id}, BookId={book_id}",
            loan_id=loan.id,
        )
        if held is not None:
            AuditTrail.record(
                user_id,
                "Reservation",
                "CompleteReservation",
                details=f"ReservationId={held.id}, LoanId={loan.id}",
                reservation_id=held.id,
            )
        for reservation_id, assigned_stock_id in released:
            ReservationService.release_hold(assigned_stock_id)
            AuditTrail.record(
                user_id,
                "Reservation",
                "CancelReservation",
                details=f"ReservationId={reservation_id}, LoanId={loan.id}",
                reservation_id=reservation_id,
            )
        return loan

    @staticmethod
    def return_loan(loan_id: int):
        """
        Returns (loan, reservation_notified).

        An already returned loan is reported exactly like a missing one.
        """
        policy = LoanPolicy.from_config()

        loan = LoanRepo.get(loan_id)
        if loan is None or loan.return_date is not None:
            raise NotFoundError("Loan not found.")

        now = utcnow()
        if not LoanRepo.mark_returned(loan_id, now):
            db.session.rollback()
            raise NotFoundError("Loan not found.")

        db.session.refresh(loan)
        loan.fine = compute_fine(loan.due_date, loan.return_date, policy.late_fee_per_day)

        stock = StockRepo.get(loan.stock_id) if loan.stock_id else None
        if stock is None:
            stock = StockRepo.get_or_create_for_book(loan.book_id)
            loan.stock_id = stock.id
        StockService.increase(stock, commit=False)
        LoanRepo.commit()

        current_app.logger.info(f"[loans] returned id={loan.id} fine={loan.fine}")
        AuditTrail.record(
            loan.user_id,
            "Return",
            "ReturnLoan",
            details=f"LoanId={loan.id}, Fine={loan.fine}",
            loan_id=loan.id,
        )

        notified = ReservationService.promote_next(stock)
        return loan, notified

    @staticmethod
    def update_loan(loan_id: int, due_date: datetime) -> Loan:
        loan = LoanService.get_loan(loan_id)
        loan.due_date = due_date
        LoanRepo.commit()

        AuditTrail.record(
            loan.user_id,
            "Update",
            "UpdateLoan",
            details=f"LoanId={loan.id}, DueDate={due_date.isoformat()}",
            loan_id=loan.id,
        )
        return loan

    @staticmethod
    def delete_loan(loan_id: int) -> None:
        loan = LoanService.get_loan(loan_id)
        user_id = loan.user_id
        LoanRepo.delete(loan)
        LoanRepo.commit()

        AuditTrail.record(
            user_id,
            "Delete",
            "DeleteLoan",
            details=f"LoanId={loan_id}",
            loan_id=loan_id,
        )
