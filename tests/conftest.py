import pytest

from library_app import create_app
from library_app.config import TestConfig
from library_app.extensions import db
from library_app.models.user import Role
from library_app.schemas import BookIn
from library_app.services.auth_service import AuthService
from library_app.services.book_service import BookService

PASSWORD = "Secret123"


@pytest.fixture
def app():
    # Her test için temiz bir in-memory veritabanı
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, role=Role.MEMBER):
        return AuthService.register(
            username=username, email=f"{username}@library.org", password=PASSWORD, role=role
        )
    return _make


@pytest.fixture
def make_book(app):
    def _make(title="Dune", author="Frank Herbert", isbn="9780441172719"):
        return BookService.create_book(BookIn(title=title, author=author, isbn=isbn))
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user.id, user.role)}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user("admin", Role.ADMIN)


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def book(make_book):
    return make_book()
