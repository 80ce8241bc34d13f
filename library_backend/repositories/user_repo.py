from library_backend.extensions import db
from library_backend.models.user import User


class UserRepo:
    @staticmethod
    def get_by_username(username: str):
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int, for_update: bool = False):
        return db.session.get(User, user_id, with_for_update=for_update)

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.commit()
        return user
