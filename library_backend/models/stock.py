from library_backend.extensions import db


class Stock(db.Model):
    __tablename__ = "stocks"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_stocks_quantity_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), unique=True, nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    # kept equal to quantity > 0 by StockService
    is_available = db.Column(db.Boolean, nullable=False, default=False)

    book = db.relationship("Book", back_populates="stock")
