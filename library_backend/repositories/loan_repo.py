from datetime import datetime

from library_backend.extensions import db
from library_backend.models.loan import Loan


class LoanRepo:
    @staticmethod
    def get(loan_id: int):
        return db.session.get(Loan, loan_id)

    @staticmethod
    def list_by_user(user_id: int):
        return Loan.query.filter_by(user_id=user_id).order_by(Loan.id.desc()).all()

    @staticmethod
    def list_all():
        return Loan.query.order_by(Loan.id.desc()).all()

    @staticmethod
    def count_active_for_user(user_id: int) -> int:
        return Loan.query.filter(Loan.user_id == user_id, Loan.return_date.is_(None)).count()

    @staticmethod
    def add(loan: Loan):
        db.session.add(loan)
        db.session.flush()
        return loan

    @staticmethod
    def mark_returned(loan_id: int, when: datetime) -> bool:
        """Claim the Active -> Returned transition; False if someone else already did."""
        updated = (
            Loan.query
            .filter(Loan.id == loan_id, Loan.return_date.is_(None))
            .update({Loan.return_date: when}, synchronize_session=False)
        )
        return updated == 1

    @staticmethod
    def delete(loan: Loan):
        db.session.delete(loan)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def find_overdue(now: datetime):
        return Loan.query.filter(
            Loan.return_date.is_(None),
            Loan.due_date < now
        ).all()

    @staticmethod
    def find_due_between(start: datetime, end: datetime):
        return Loan.query.filter(
            Loan.return_date.is_(None),
            Loan.due_date >= start,
            Loan.due_date <= end
        ).all()
