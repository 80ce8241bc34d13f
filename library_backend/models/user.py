from library_backend.extensions import db
from library_backend.utils.timeutil import utcnow


class UserRoles:
    ADMIN = "Admin"
    LIBRARIAN = "Librarian"
    USER = "User"

    ALL = (ADMIN, LIBRARIAN, USER)
    STAFF = (ADMIN, LIBRARIAN)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=UserRoles.USER)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def is_staff(self) -> bool:
        return self.role in UserRoles.STAFF
