from library_backend.extensions import db
from library_backend.models.stock import Stock


class StockRepo:
    @staticmethod
    def list_all():
        return Stock.query.order_by(Stock.id).all()

    @staticmethod
    def get(stock_id: int):
        return db.session.get(Stock, stock_id)

    @staticmethod
    def get_by_book(book_id: int):
        return Stock.query.filter_by(book_id=book_id).first()

    @staticmethod
    def get_or_create_for_book(book_id: int):
        """Stock rows are created lazily for books catalogued without one."""
        stock = StockRepo.get_by_book(book_id)
        if stock is None:
            stock = Stock(book_id=book_id, quantity=0, is_available=False)
            db.session.add(stock)
            db.session.flush()
        return stock

    @staticmethod
    def create(stock: Stock):
        db.session.add(stock)
        db.session.commit()
        return stock

    @staticmethod
    def delete(stock: Stock):
        db.session.delete(stock)
        db.session.commit()
