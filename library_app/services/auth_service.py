from flask import current_app
from flask_jwt_extended import create_access_token, decode_token, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from library_app.errors import AuthError, ConflictError, NotFoundError
from library_app.extensions import db
from library_app.models.user import Role, User
from library_app.repositories.user_repo import UserRepo


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str, role: str = Role.MEMBER):
        existing = UserRepo.get_by_email(email) or UserRepo.get_by_username(username)
        if existing:
            message = "Email already registered" if existing.email == email else "Username already taken"
            raise ConflictError(message, code="USER_EXISTS")

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        UserRepo.create(user)
        try:
            db.session.commit()
        except IntegrityError:
            # iki kayıt aynı anda geldiyse unique index yakalar
            db.session.rollback()
            raise ConflictError("User with this email or username already exists", code="USER_EXISTS")

        current_app.logger.info(f"[auth] Registered user {user.username} ({user.role})")
        return user

    @staticmethod
    def login(email: str, password: str):
        user = UserRepo.get_by_email(email)
        if not user or not check_password_hash(user.password_hash, password):
            current_app.logger.info(f"[auth] Failed login for {email}")
            raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")

        return AuthService.issue_token(user.id, user.role), user

    @staticmethod
    def issue_token(subject_id: int, role: str) -> str:
        return create_access_token(identity=str(subject_id), additional_claims={"role": role})

    @staticmethod
    def verify_token(token: str):
        """
        Returns {"subject_id": int, "role": str} for a valid token, None otherwise
        (bad signature, malformed, expired).
        """
        try:
            claims = decode_token(token)
        except (JWTExtendedException, PyJWTError):
            return None
        try:
            subject_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        return {"subject_id": subject_id, "role": claims.get("role")}

    @staticmethod
    def current_identity():
        """JWT identity + role of the current request (after jwt_required)."""
        user_id = int(get_jwt_identity())
        role = (get_jwt() or {}).get("role")
        return user_id, role

    @staticmethod
    def get_profile(user_id: int):
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        return user
