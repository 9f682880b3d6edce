# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for password hashing.

Self sign-up is allowed: register_user creates a bare identity (no
organization). The identity joins a tenant either through onboarding
(creates a barbershop, becomes its admin) or by an admin adding it to the
team (team_service.create_barber).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor BCRYPT_ROUNDS, default 12)
- Minimum 6 characters
- Emails are normalized to lowercase and unique across the system
"""

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from ..validation import ConflictError, FieldValidationError, is_valid_email
from barberdesk.time_utils import utcnow


MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_password_strength(password: str | None) -> None:
    """Raises PasswordValidationError if requirements not met."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def validate_signup_fields(email: str | None, password: str | None, full_name: str | None) -> dict[str, str]:
    """Field-level checks shared by sign-up and team member creation."""
    errors: dict[str, str] = {}
    if not is_valid_email(normalize_email(email)):
        errors["email"] = "Invalid email address"
    try:
        validate_password_strength(password)
    except PasswordValidationError as e:
        errors["password"] = str(e)
    if len((full_name or "").strip()) < MIN_NAME_LENGTH:
        errors["full_name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"
    return errors


def create_user(email: str, password: str, full_name: str | None = None) -> User:
    """
    Create an authentication identity with a bcrypt password hash.

    Caller owns the transaction: the user is flushed, not committed.

    Raises:
        FieldValidationError: email/password/full_name invalid
        ConflictError: email already registered
    """
    errors = validate_signup_fields(email, password, full_name)
    if errors:
        raise FieldValidationError(errors)

    email = normalize_email(email)
    if db.session.query(User).filter_by(email=email).first():
        raise ConflictError("User already registered")

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name.strip(),
        is_active=True,
    )
    db.session.add(user)
    db.session.flush()
    return user


def register_user(email: str, password: str, full_name: str) -> User:
    """Self sign-up. Commits the new user."""
    user = create_user(email, password, full_name)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user by email and password.

    Returns User if credentials valid and account active, None otherwise.
    Updates last_login_at on success.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user or not user.is_active:
        return None

    if not verify_password(password or "", user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user
