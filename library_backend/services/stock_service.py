"""
Stock ledger.

Every change to ``Stock.quantity`` goes through this module so the two
invariants hold after each call: quantity never drops below zero and
``is_available`` equals ``quantity > 0``.
"""
from __future__ import annotations

from sqlalchemy import case
from sqlalchemy import inspect as sa_inspect

from library_backend.errors import ConflictError, NotFoundError, PolicyViolation
from library_backend.extensions import db
from library_backend.models.stock import Stock
from library_backend.repositories.book_repo import BookRepo
from library_backend.repositories.stock_repo import StockRepo


class StockService:
    @staticmethod
    def _is_persistent(stock: Stock) -> bool:
        return sa_inspect(stock).persistent

    @staticmethod
    def set_availability(stock: Stock) -> Stock:
        stock.is_available = (stock.quantity or 0) > 0
        return stock

    @staticmethod
    def adjust_quantity(stock: Stock, delta: int, commit: bool = True) -> Stock:
        """
        quantity <- max(0, quantity + delta). A delta that would go negative
        clamps to zero instead of failing.

        For a stored row the change is a single UPDATE (no read-modify-write)
        and is committed unless ``commit=False``; a transient stock is only
        changed in memory.
        """
        if not StockService._is_persistent(stock):
            stock.quantity = max(0, (stock.quantity or 0) + delta)
            return StockService.set_availability(stock)

        new_qty = case((Stock.quantity + delta < 0, 0), else_=Stock.quantity + delta)
        Stock.query.filter(Stock.id == stock.id).update(
            {Stock.quantity: new_qty}, synchronize_session=False
        )
        db.session.refresh(stock)
        StockService.set_availability(stock)
        if commit:
            db.session.commit()
        return stock

    @staticmethod
    def increase(stock: Stock, commit: bool = True) -> Stock:
        return StockService.adjust_quantity(stock, +1, commit=commit)

    @staticmethod
    def decrease(stock: Stock, commit: bool = True) -> Stock:
        return StockService.adjust_quantity(stock, -1, commit=commit)

    @staticmethod
    def try_decrease(stock: Stock) -> bool:
        """
        Take one unit only if one is left (compare-and-swap on quantity).
        Does not commit; the caller owns the transaction.
        """
        if not StockService._is_persistent(stock):
            if (stock.quantity or 0) <= 0:
                return False
            StockService.adjust_quantity(stock, -1)
            return True

        updated = (
            Stock.query
            .filter(Stock.id == stock.id, Stock.quantity > 0)
            .update({Stock.quantity: Stock.quantity - 1}, synchronize_session=False)
        )
        db.session.refresh(stock)
        StockService.set_availability(stock)
        return updated == 1

    # ---- administration

    @staticmethod
    def list_stocks():
        return StockRepo.list_all()

    @staticmethod
    def get_stock(stock_id: int) -> Stock:
        stock = StockRepo.get(stock_id)
        if not stock:
            raise NotFoundError("Stock not found.")
        return stock

    @staticmethod
    def create_stock(book_id: int, quantity: int = 0) -> Stock:
        if quantity < 0:
            raise PolicyViolation("Quantity cannot be negative.")
        if not BookRepo.get(book_id):
            raise NotFoundError("Book not found.")
        if StockRepo.get_by_book(book_id):
            raise ConflictError("A stock entry already exists for that book.")

        stock = Stock(book_id=book_id, quantity=quantity)
        StockService.set_availability(stock)
        return StockRepo.create(stock)

    @staticmethod
    def set_quantity(stock_id: int, quantity: int) -> Stock:
        if quantity < 0:
            raise PolicyViolation("Quantity cannot be negative.")
        stock = StockService.get_stock(stock_id)
        return StockService.adjust_quantity(stock, quantity - stock.quantity)

    @staticmethod
    def adjust(stock_id: int, delta: int) -> Stock:
        if delta == 0:
            raise PolicyViolation("Adjustment cannot be zero.")
        stock = StockService.get_stock(stock_id)
        return StockService.adjust_quantity(stock, delta)

    @staticmethod
    def delete_stock(stock_id: int) -> None:
        stock = StockService.get_stock(stock_id)
        StockRepo.delete(stock)
