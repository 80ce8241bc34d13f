import enum
from decimal import Decimal

from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class LoanStatus(enum.Enum):
    ACTIVE = "Active"
    RETURNED = "Returned"


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    stock_id = db.Column(db.Integer, db.ForeignKey("stocks.id", ondelete="SET NULL"), nullable=True)

    loan_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    due_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=True)  # null = active

    fine = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    user = db.relationship("User", backref="loans")
    book = db.relationship("Book", backref="loans")

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.ACTIVE if self.return_date is None else LoanStatus.RETURNED

    @property
    def is_active(self) -> bool:
        return self.return_date is None
