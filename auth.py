import hashlib
import logging
import re
import sqlite3
from typing import Optional

from database import ComponentLibraryDB
from errors import AuthError, StoreError
from models import User

logger = logging.getLogger(__name__)

PASSWORD_SALT = "component-library-salt"
MIN_PASSWORD_LENGTH = 6
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEMO_EMAIL = "admin@library.local"
DEMO_USERNAME = "admin"
DEMO_PASSWORD = "admin123"


def hash_password(password: str) -> str:
    return hashlib.sha256((password + PASSWORD_SALT).encode("utf-8")).hexdigest()


def clean_username(username: str) -> str:
    """Lowercase and keep only [a-z0-9-_]."""
    return re.sub(r"[^a-z0-9\-_]", "", username.lower())


class AuthManager:
    """
    Tracks the current user of the library.

    initialize() must be called once before anything else; it either
    returns with the auth system ready or raises AuthError.
    """

    def __init__(self, db: ComponentLibraryDB):
        self.db = db
        self.is_initialized = False
        self._current_user: Optional[User] = None

    def initialize(self) -> None:
        """
        Make the auth system ready and seed the demo account on an empty user table.

        Raises:
            AuthError: If the user table cannot be read or written
        """
        try:
            if self.db.count_users() == 0:
                self.db.create_user(DEMO_EMAIL, DEMO_USERNAME, hash_password(DEMO_PASSWORD))
                logger.info("Demo user created: %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
        except (sqlite3.Error, StoreError) as e:
            logger.error("Failed to initialize auth: %s", e)
            raise AuthError(f"Authentication system unavailable: {e}") from e
        self.is_initialized = True

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise AuthError("Authentication system not initialized")

    @property
    def current_user(self) -> Optional[User]:
        """The logged-in user, or None for a guest session."""
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def register(self, email: str, username: str, password: str, confirm_password: str) -> User:
        """
        Create a new account.

        Raises:
            AuthError: On any validation failure or a duplicate account
        """
        self._require_initialized()

        if not email or not username or not password:
            raise AuthError("All fields are required")
        if password != confirm_password:
            raise AuthError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if not EMAIL_RE.match(email):
            raise AuthError("Please enter a valid email address")

        username = clean_username(username)
        if not username:
            raise AuthError("Username must contain alphanumeric characters")

        try:
            user = self.db.create_user(email, username, hash_password(password))
        except StoreError as e:
            raise AuthError(str(e)) from e
        logger.info("User registered: %s", username)
        return user

    def login(self, email: str, password: str) -> User:
        """
        Log a user in and make them the current user.

        Raises:
            AuthError: If the credentials are wrong
        """
        self._require_initialized()

        row = self.db.get_user_by_email(email)
        if not row or row["password_hash"] != hash_password(password):
            raise AuthError("Invalid email or password")

        self.db.touch_login(row["id"])
        self._current_user = User(
            id=row["id"],
            email=row["email"],
            username=row["username"],
            display_name=row["display_name"],
            created_at=row["created_at"],
        )
        logger.info("User logged in: %s", self._current_user.username)
        return self._current_user

    def logout(self) -> None:
        if self._current_user:
            logger.info("User logged out: %s", self._current_user.username)
        self._current_user = None

    def demo_user_id(self) -> Optional[str]:
        row = self.db.get_user_by_email(DEMO_EMAIL)
        return row["id"] if row else None
