from library_backend.errors import ConflictError, NotFoundError, PolicyViolation
from library_backend.models.book import Book
from library_backend.models.loan import Loan
from library_backend.models.reservation import Reservation
from library_backend.models.stock import Stock
from library_backend.repositories.book_repo import BookRepo
from library_backend.services.stock_service import StockService


class BookService:
    @staticmethod
    def list_books():
        return BookRepo.list_all()

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found.")
        return book

    @staticmethod
    def create_book(data: dict):
        title = (data.get("title") or "").strip()
        author = (data.get("author") or "").strip()
        if not title or not author:
            raise PolicyViolation("title and author are required.")

        isbn = (data.get("isbn") or "").strip() or None
        if isbn and BookRepo.get_by_isbn(isbn):
            raise ConflictError("A book with this ISBN already exists.")

        book = Book(title=title, author=author, isbn=isbn)

        # optional initial stock; without it the stock row is created later
        if data.get("quantity") is not None:
            quantity = int(data["quantity"])
            if quantity < 0:
                raise PolicyViolation("Quantity cannot be negative.")
            book.stock = StockService.set_availability(Stock(quantity=quantity))

        return BookRepo.create(book)

    @staticmethod
    def update_book(book_id: int, data: dict):
        book = BookService.get_book(book_id)
        for k in ["title", "author"]:
            if data.get(k):
                setattr(book, k, str(data[k]).strip())
        if "isbn" in data:
            book.isbn = (data.get("isbn") or "").strip() or None

        BookRepo.update()
        return book

    @staticmethod
    def delete_book(book_id: int):
        book = BookService.get_book(book_id)

        if Loan.query.filter_by(book_id=book_id).count() or Reservation.query.filter_by(book_id=book_id).count():
            raise ConflictError("This book has loans or reservations and cannot be deleted.")

        BookRepo.delete(book)
