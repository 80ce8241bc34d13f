from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    isbn = db.Column(db.String(32), unique=True, nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    stock = db.relationship("Stock", back_populates="book", uselist=False, cascade="all, delete-orphan")
