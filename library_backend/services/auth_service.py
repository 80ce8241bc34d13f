from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from library_backend.errors import ConflictError, PolicyViolation
from library_backend.models.user import User, UserRoles
from library_backend.repositories.user_repo import UserRepo


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str, role: str = UserRoles.USER):
        if role not in UserRoles.ALL:
            raise PolicyViolation(f"Unknown role: {role}")
        if UserRepo.get_by_username(username) or UserRepo.get_by_email(email):
            raise ConflictError("Username or e-mail already registered.")

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role=role
        )
        UserRepo.create(user)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username}
        )

    @staticmethod
    def login(username: str, password: str):
        user = UserRepo.get_by_username(username)
        if not user or not check_password_hash(user.password_hash, password):
            raise ValueError("Invalid username or password.")

        return AuthService.issue_token(user), user
