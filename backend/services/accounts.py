# backend/services/accounts.py
"""Registration and login against the users table."""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.users import User
from schemas.user import SessionUser
from utils.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    PersistenceError,
    ValidationError,
)
from utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)


def register_user(db: Session, name: str, email: str, password: str) -> User:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email or not password:
        raise ValidationError()

    # Exact match, as stored
    try:
        existing = db.query(User.id).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed during registration")
        raise PersistenceError() from exc
    if existing:
        raise DuplicateEmailError()

    user = User(name=name, email=email, password_hash=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Another request registered the same email in between
        db.rollback()
        raise DuplicateEmailError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Could not persist new user")
        raise PersistenceError() from exc
    db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> SessionUser:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError()

    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed during login")
        raise PersistenceError() from exc

    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return SessionUser.model_validate(user)
