import pytest

from library_backend import create_app
from library_backend.config import TestConfig
from library_backend.extensions import db
from library_backend.models import Book, Stock, User, UserRoles
from library_backend.services.auth_service import AuthService
from library_backend.services.stock_service import StockService


@pytest.fixture
def app():
    # fresh in-memory database per test
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role=UserRoles.USER, username=None):
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        user = User(
            username=name,
            email=f"{name}@library.test",
            password_hash="x",
            role=role,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_book(app):
    counter = {"n": 0}

    def _make(quantity=1, title=None):
        """quantity=None creates a book without any stock row."""
        counter["n"] += 1
        book = Book(title=title or f"Book {counter['n']}", author="Some Author")
        if quantity is not None:
            book.stock = StockService.set_availability(Stock(quantity=quantity))
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}

    return _header


@pytest.fixture
def librarian(make_user):
    return make_user(role=UserRoles.LIBRARIAN, username="librarian")


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRoles.ADMIN, username="admin")
